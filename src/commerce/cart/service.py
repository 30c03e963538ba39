"""CartService: per-user cart operations and the live cart view."""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from commerce.cart.cart import Cart
from commerce.cart.items import AddToCart, ClearCart
from commerce.catalog.product import Product
from commerce.utils.locks import KeyedLock
from commerce.utils.logging import component_logger


@dataclass(frozen=True)
class CartItemView:
    """A cart line joined with the product's current name and price."""

    line_id: str
    user_id: str
    product_id: str
    product_name: str
    unit_price: float
    quantity: int
    available_stock: int

    @property
    def subtotal(self) -> float:
        return self.unit_price * self.quantity


class CartService:
    def __init__(self, logger=None, locks: KeyedLock | None = None) -> None:
        self.logger = logger or component_logger("cart")
        self._locks = locks if locks is not None else KeyedLock()

    @contextmanager
    def locked(self, user_id) -> Iterator[None]:
        """Serialize cart mutations (and checkout) for one user."""
        with self._locks.hold(str(user_id)):
            yield

    def add_item(self, user_id, product_id, quantity: int):
        with self.locked(user_id):
            line = current_domain.process(
                AddToCart(user_id=str(user_id), product_id=str(product_id), quantity=quantity),
                asynchronous=False,
            )
        self.logger.info(
            "Item added to cart",
            user_id=str(user_id),
            product_id=str(product_id),
            quantity=quantity,
            line_quantity=line.quantity,
        )
        return line

    def lines(self, user_id) -> list:
        cart = current_domain.repository_for(Cart).for_user(str(user_id))
        return list(cart.lines) if cart else []

    def list_items(self, user_id) -> list[CartItemView]:
        """Cart lines with current product data; prices may have moved since the add."""
        repo = current_domain.repository_for(Product)
        views = []
        for line in self.lines(user_id):
            try:
                product = repo.get(str(line.product_id))
            except ObjectNotFoundError:
                self.logger.warning(
                    "Cart line refers to a missing product",
                    user_id=str(user_id),
                    product_id=str(line.product_id),
                )
                continue
            views.append(
                CartItemView(
                    line_id=str(line.id),
                    user_id=str(user_id),
                    product_id=str(product.id),
                    product_name=product.name,
                    unit_price=product.price,
                    quantity=line.quantity,
                    available_stock=product.stock,
                )
            )
        return views

    def clear(self, user_id) -> int:
        with self.locked(user_id):
            removed = current_domain.process(ClearCart(user_id=str(user_id)), asynchronous=False)
        self.logger.info("Cart cleared", user_id=str(user_id), lines_removed=removed)
        return removed
