"""Order placement: turns a reserved, priced cart snapshot into an Order.

The order is written and the cart emptied in the same unit of work. Stock has
already been reserved by the workflow before this command is dispatched.
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from commerce.cart.cart import Cart
from commerce.domain import commerce
from commerce.order.order import Order

logger = structlog.get_logger(__name__)


@commerce.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    lines = Text(required=True)  # JSON list of {product_id, product_name, quantity, unit_price}


@commerce.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        lines = json.loads(command.lines)
        order = Order.create(user_id=command.user_id, lines=lines)
        current_domain.repository_for(Order).add(order)

        cart_repo = current_domain.repository_for(Cart)
        cart = cart_repo.for_user(command.user_id)
        cleared = cart.clear() if cart is not None else 0
        if cleared:
            cart_repo.add(cart)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            user_id=str(command.user_id),
            cleared_cart_lines=cleared,
        )
        return order
