"""Cart item management: commands and handler."""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from commerce.cart.cart import Cart
from commerce.catalog.catalog import load_product
from commerce.domain import commerce


@commerce.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@commerce.command(part_of="Cart")
class ClearCart:
    user_id = Identifier(required=True)


@commerce.command_handler(part_of=Cart)
class CartCommandHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = load_product(command.product_id)

        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id) or Cart.open_for(command.user_id)
        line = cart.add_item(product.id, command.quantity, available=product.stock)
        repo.add(cart)
        return line

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)
        if cart is None:
            return 0

        removed = cart.clear()
        if removed:
            repo.add(cart)
        return removed
