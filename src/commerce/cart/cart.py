"""Cart aggregate (CQRS): one cart per user holding product quantities.

Adding a product that is already in the cart merges into the existing line.
Stock is not reserved here; the cart only refuses quantities that exceed the
stock available at the time of the add.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer

from commerce.cart.events import CartCleared, CartItemAdded
from commerce.domain import commerce
from commerce.errors import InsufficientStockError


@commerce.entity(part_of="Cart")
class CartLine:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@commerce.aggregate
class Cart:
    user_id = Identifier(required=True, unique=True)
    lines = HasMany(CartLine)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def open_for(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, created_at=now, updated_at=now)

    def line_for(self, product_id):
        return next((line for line in self.lines if str(line.product_id) == str(product_id)), None)

    def add_item(self, product_id, quantity, available):
        """Add ``quantity`` of a product, merging with an existing line.

        ``available`` is the product's current stock; the merged quantity
        must not exceed it.
        """
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        existing = self.line_for(product_id)
        requested = quantity + (existing.quantity if existing else 0)
        if requested > available:
            raise InsufficientStockError(str(product_id), available=available, requested=requested)

        now = datetime.now(UTC)
        if existing:
            existing.quantity = requested
            line = existing
        else:
            line = CartLine(product_id=product_id, quantity=quantity, added_at=now)
            self.add_lines(line)

        self.updated_at = now
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                product_id=str(product_id),
                quantity_added=quantity,
                line_quantity=line.quantity,
            )
        )
        return line

    def clear(self):
        """Remove every line. Clearing an empty cart is a no-op."""
        if not self.lines:
            return 0

        removed = len(self.lines)
        for line in list(self.lines):
            self.remove_lines(line)

        self.updated_at = datetime.now(UTC)
        self.raise_(CartCleared(cart_id=str(self.id), user_id=str(self.user_id), lines_removed=removed))
        return removed


@commerce.repository(part_of=Cart)
class CartRepository:
    def for_user(self, user_id) -> Cart | None:
        carts = self._dao.query.filter(user_id=str(user_id)).all().items
        return carts[0] if carts else None
