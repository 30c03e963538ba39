"""Payment outcome on the order side: command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from commerce.domain import commerce
from commerce.order.order import Order, PaymentOutcome


@commerce.command(part_of="Order")
class ApplyPaymentOutcome:
    order_id = Identifier(required=True)
    outcome = String(required=True, choices=PaymentOutcome)
    reason = String(max_length=500)


@commerce.command_handler(part_of=Order)
class OrderPaymentHandler:
    @handle(ApplyPaymentOutcome)
    def apply_payment_outcome(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        applied = order.apply_payment_outcome(command.outcome, reason=command.reason)
        if applied:
            repo.add(order)
        return order, applied
