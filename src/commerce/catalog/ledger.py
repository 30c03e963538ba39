"""StockLedger: serializes every change to a product's stock.

Each reserve/release holds the product's lock across the whole
load-check-write-commit unit of work, so two checkouts racing for the last
units of a product cannot both succeed. Callers that write several products
in one unit of work (order cancellation) hold all of their locks through
``holding``.
"""

from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from commerce.catalog.product import Product
from commerce.catalog.stock import ReleaseStock, ReserveStock
from commerce.errors import InsufficientStockError, NotFoundError
from commerce.utils.locks import KeyedLock
from commerce.utils.logging import component_logger


class StockLedger:
    def __init__(self, logger=None, locks: KeyedLock | None = None) -> None:
        self.logger = logger or component_logger("stock_ledger")
        self._locks = locks if locks is not None else KeyedLock()

    @contextmanager
    def holding(self, product_ids: Iterable) -> Iterator[None]:
        with self._locks.hold_all(product_ids):
            yield

    def reserve(self, product_id, quantity: int) -> Product:
        """Decrement stock by ``quantity`` and return the updated product.

        Raises ``InsufficientStockError`` (carrying the available quantity)
        without touching stock when there is not enough.
        """
        product_id = str(product_id)
        with self._locks.hold(product_id):
            try:
                product = current_domain.process(
                    ReserveStock(product_id=product_id, quantity=quantity),
                    asynchronous=False,
                )
            except ObjectNotFoundError as exc:
                raise NotFoundError("Product", product_id) from exc
            except InsufficientStockError as exc:
                self.logger.info(
                    "Stock reservation refused",
                    product_id=product_id,
                    requested=exc.requested,
                    available=exc.available,
                )
                raise

        self.logger.debug("Stock reserved", product_id=product_id, quantity=quantity, remaining=product.stock)
        return product

    def release(self, product_id, quantity: int, reason: str = "compensation") -> Product:
        """Increment stock by ``quantity``. Used to compensate a reservation."""
        product_id = str(product_id)
        with self._locks.hold(product_id):
            try:
                product = current_domain.process(
                    ReleaseStock(product_id=product_id, quantity=quantity, reason=reason),
                    asynchronous=False,
                )
            except ObjectNotFoundError as exc:
                raise NotFoundError("Product", product_id) from exc

        self.logger.debug(
            "Stock released",
            product_id=product_id,
            quantity=quantity,
            remaining=product.stock,
            reason=reason,
        )
        return product
