"""Domain events for the Cart aggregate."""

from protean.fields import Identifier, Integer

from commerce.domain import commerce


@commerce.event(part_of="Cart")
class CartItemAdded:
    """A product was added to a cart, or its quantity in the cart increased."""

    __version__ = 1

    cart_id: Identifier(required=True)
    user_id: Identifier(required=True)
    product_id: Identifier(required=True)
    quantity_added: Integer(required=True)
    line_quantity: Integer(required=True)


@commerce.event(part_of="Cart")
class CartCleared:
    __version__ = 1

    cart_id: Identifier(required=True)
    user_id: Identifier(required=True)
    lines_removed: Integer(required=True)
