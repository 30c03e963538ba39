"""Payment initiation: opens the PENDING payment record for an order."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier
from protean.utils.globals import current_domain

from commerce.domain import commerce
from commerce.errors import DuplicatePaymentError, InvalidStateError, NotFoundError
from commerce.order.order import Order
from commerce.payment.payment import Payment

logger = structlog.get_logger(__name__)


@commerce.command(part_of="Payment")
class InitiatePayment:
    order_id = Identifier(required=True)
    amount = Float(required=True)


@commerce.command_handler(part_of=Payment)
class InitiatePaymentHandler:
    @handle(InitiatePayment)
    def initiate_payment(self, command):
        try:
            order = current_domain.repository_for(Order).get(command.order_id)
        except ObjectNotFoundError as exc:
            raise NotFoundError("Order", command.order_id) from exc

        if not order.is_open:
            raise InvalidStateError(
                f"Order is not in CREATED status. Current status: {order.status}",
                current_status=order.status,
            )

        repo = current_domain.repository_for(Payment)
        if repo.find_by_order_id(command.order_id) is not None:
            raise DuplicatePaymentError(command.order_id)

        payment = Payment.initiate(order_id=command.order_id, amount=command.amount)
        repo.add(payment)

        logger.info(
            "Payment record opened",
            payment_id=str(payment.id),
            order_id=str(command.order_id),
            amount=command.amount,
        )
        return payment
