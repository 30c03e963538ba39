"""Stock movements: reserve and release commands and their handler.

These commands are only dispatched by the StockLedger, which holds the
product's lock for the whole unit of work.
"""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from commerce.catalog.product import Product
from commerce.domain import commerce


@commerce.command(part_of="Product")
class ReserveStock:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@commerce.command(part_of="Product")
class ReleaseStock:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    reason = String(max_length=100)


@commerce.command_handler(part_of=Product)
class StockHandler:
    @handle(ReserveStock)
    def reserve_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.reserve(command.quantity)
        repo.add(product)
        return product

    @handle(ReleaseStock)
    def release_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.release(command.quantity)
        repo.add(product)
        return product
