"""Gateway webhook: resolves the payment and settles the order together.

Both aggregates are written in the handler's unit of work, so a payment is
never marked resolved without its order being settled, and vice versa.
"""

from dataclasses import dataclass

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from commerce.domain import commerce
from commerce.errors import NotFoundError
from commerce.order.order import Order, PaymentOutcome
from commerce.payment.payment import Payment

logger = structlog.get_logger(__name__)


@commerce.command(part_of="Payment")
class ProcessPaymentWebhook:
    order_id = Identifier(required=True)
    external_payment_id = String(required=True, max_length=255)
    status = String(required=True, choices=PaymentOutcome)
    message = String(max_length=500)


@dataclass(frozen=True)
class WebhookResult:
    payment: Payment
    order: Order
    payment_updated: bool
    order_updated: bool


@commerce.command_handler(part_of=Payment)
class PaymentWebhookHandler:
    @handle(ProcessPaymentWebhook)
    def process_webhook(self, command):
        payment_repo = current_domain.repository_for(Payment)
        payment = payment_repo.find_by_order_id(command.order_id)
        if payment is None:
            raise NotFoundError("Payment for order", command.order_id)

        order_repo = current_domain.repository_for(Order)
        try:
            order = order_repo.get(command.order_id)
        except ObjectNotFoundError as exc:
            raise NotFoundError("Order", command.order_id) from exc

        payment_updated = payment.record_outcome(
            command.status,
            external_payment_id=command.external_payment_id,
            message=command.message,
        )
        order_updated = False
        if payment_updated:
            payment_repo.add(payment)
            order_updated = order.apply_payment_outcome(command.status, reason=command.message)
            if order_updated:
                order_repo.add(order)

        logger.debug(
            "Payment webhook recorded",
            order_id=str(command.order_id),
            status=command.status,
            payment_updated=payment_updated,
            order_updated=order_updated,
        )

        return WebhookResult(
            payment=payment,
            order=order,
            payment_updated=payment_updated,
            order_updated=order_updated,
        )
