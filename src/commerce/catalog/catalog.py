"""Read and write access to the product catalogue."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from commerce.catalog.management import AddProduct, ChangeProductPrice
from commerce.catalog.product import Product
from commerce.errors import NotFoundError
from commerce.utils.locks import KeyedLock
from commerce.utils.logging import component_logger


def load_product(product_id) -> Product:
    """Fetch a product or raise ``NotFoundError``."""
    try:
        return current_domain.repository_for(Product).get(str(product_id))
    except ObjectNotFoundError as exc:
        raise NotFoundError("Product", product_id) from exc


class ProductCatalog:
    def __init__(self, logger=None, locks: KeyedLock | None = None) -> None:
        self.logger = logger or component_logger("catalog")
        # Shared with the StockLedger so price changes and stock moves on a
        # product never overlap.
        self._locks = locks if locks is not None else KeyedLock()

    def add_product(self, name, price, stock=0, description=None) -> Product:
        product_id = current_domain.process(
            AddProduct(name=name, price=price, stock=stock, description=description),
            asynchronous=False,
        )
        self.logger.info("Product added", product_id=product_id, stock=stock, price=price)
        return self.get(product_id)

    def change_price(self, product_id, price) -> Product:
        product_id = str(product_id)
        with self._locks.hold(product_id):
            load_product(product_id)
            product = current_domain.process(
                ChangeProductPrice(product_id=product_id, price=price),
                asynchronous=False,
            )
        self.logger.info("Product price changed", product_id=product_id, price=price)
        return product

    def get(self, product_id) -> Product:
        return load_product(product_id)

    def listing(self) -> list[Product]:
        return current_domain.repository_for(Product).listing()

    def search(self, term: str) -> list[Product]:
        return current_domain.repository_for(Product).search(term)
