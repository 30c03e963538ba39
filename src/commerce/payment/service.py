"""PaymentService: opens payment records and hands them to the gateway."""

from protean.utils.globals import current_domain

from commerce.errors import NotFoundError
from commerce.gateway.port import PaymentGateway
from commerce.order.workflow import OrderWorkflow
from commerce.payment.initiation import InitiatePayment
from commerce.payment.payment import Payment
from commerce.utils.logging import component_logger


class PaymentService:
    def __init__(self, workflow: OrderWorkflow, gateway: PaymentGateway, logger=None) -> None:
        self.workflow = workflow
        self.gateway = gateway
        self.logger = logger or component_logger("payments")

    def initiate_payment(self, order_id, amount) -> Payment:
        """Create the PENDING payment for a CREATED order and submit it.

        Returns as soon as the request is handed over; the outcome arrives
        later through the webhook. A gateway error is logged, not raised:
        the payment record stays PENDING until it expires.
        """
        order_id = str(order_id)
        with self.workflow.locked(order_id):
            payment = current_domain.process(
                InitiatePayment(order_id=order_id, amount=amount),
                asynchronous=False,
            )

        self.logger.info("Payment initiated", order_id=order_id, payment_id=str(payment.id), amount=amount)

        try:
            receipt = self.gateway.submit(order_id, amount, str(payment.id))
        except Exception as exc:
            self.logger.error(
                "Payment gateway request failed",
                order_id=order_id,
                payment_id=str(payment.id),
                gateway=type(self.gateway).__name__,
                error=str(exc),
            )
        else:
            self.logger.info(
                "Payment submitted to gateway",
                order_id=order_id,
                payment_id=str(payment.id),
                external_payment_id=receipt.external_payment_id,
                gateway_status=receipt.status,
            )
        return payment

    def payment_for(self, order_id) -> Payment:
        payment = current_domain.repository_for(Payment).find_by_order_id(str(order_id))
        if payment is None:
            raise NotFoundError("Payment for order", order_id)
        return payment
