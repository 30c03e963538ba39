"""Product aggregate (CQRS): sellable item with a price and a stock count.

Stock is only ever changed through ``reserve`` and ``release``, which the
StockLedger calls under a per-product lock. Price changes never touch orders
already placed: orders keep their own price snapshot.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Integer, String, Text

from commerce.catalog.events import ProductAdded, ProductPriceChanged, StockReleased, StockReserved
from commerce.domain import commerce
from commerce.errors import InsufficientStockError


@commerce.aggregate
class Product:
    name = String(required=True, max_length=255)
    description = Text()
    price = Float(required=True, min_value=0.0)
    stock = Integer(required=True, min_value=0, default=0)
    created_at = DateTime()

    @classmethod
    def add(cls, name, price, stock=0, description=None):
        product = cls(
            name=name,
            description=description,
            price=price,
            stock=stock,
            created_at=datetime.now(UTC),
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                name=product.name,
                price=product.price,
                stock=product.stock,
                added_at=product.created_at,
            )
        )
        return product

    def change_price(self, new_price):
        if new_price is None or new_price < 0:
            raise ValidationError({"price": ["Price must not be negative"]})

        previous_price = self.price
        if previous_price == new_price:
            return

        self.price = new_price
        self.raise_(
            ProductPriceChanged(
                product_id=str(self.id),
                previous_price=previous_price,
                new_price=new_price,
            )
        )

    def reserve(self, quantity):
        """Take ``quantity`` units out of stock, or fail without changing anything."""
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        if self.stock < quantity:
            raise InsufficientStockError(str(self.id), available=self.stock, requested=quantity)

        self.stock -= quantity
        self.raise_(
            StockReserved(
                product_id=str(self.id),
                quantity=quantity,
                remaining=self.stock,
            )
        )

    def release(self, quantity):
        """Put ``quantity`` units back. There is no upper bound."""
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        self.stock += quantity
        self.raise_(
            StockReleased(
                product_id=str(self.id),
                quantity=quantity,
                remaining=self.stock,
            )
        )


@commerce.repository(part_of=Product)
class ProductRepository:
    def listing(self) -> list[Product]:
        products = self._dao.query.all().items
        return sorted(products, key=lambda p: (p.name.lower(), str(p.id)))

    def search(self, term: str) -> list[Product]:
        """Products whose name contains ``term``, ignoring case."""
        needle = (term or "").strip().lower()
        if not needle:
            return []
        return [p for p in self.listing() if needle in p.name.lower()]
