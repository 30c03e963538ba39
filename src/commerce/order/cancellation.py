"""Order cancellation: command and handler.

The order's CANCELLED transition and the stock release for every line are
written in the handler's unit of work, so either all of them commit or none
do and the cancel can be retried.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from commerce.catalog.product import Product
from commerce.domain import commerce
from commerce.errors import NotFoundError
from commerce.order.order import Order

logger = structlog.get_logger(__name__)


@commerce.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)


@commerce.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order_repo = current_domain.repository_for(Order)
        order = order_repo.get(command.order_id)
        order.cancel()

        product_repo = current_domain.repository_for(Product)
        products = {}
        for line in order.lines:
            product_id = str(line.product_id)
            if product_id not in products:
                try:
                    products[product_id] = product_repo.get(product_id)
                except ObjectNotFoundError as exc:
                    raise NotFoundError("Product", product_id) from exc
            products[product_id].release(line.quantity)

        for product in products.values():
            product_repo.add(product)
        order_repo.add(order)

        logger.info(
            "Order cancellation recorded",
            order_id=str(order.id),
            released_products=len(products),
        )
        return order
