"""PaymentReconciler: applies gateway outcomes to payments and orders.

Webhooks are correlated by order id only. Each one is processed under the
order's lock and written in a single unit of work (see ``webhook.py``).

Outcome policy:
- first outcome for a PENDING payment resolves the payment and, if the order
  is still CREATED, moves it to PAID or FAILED;
- an outcome for a cancelled order resolves the payment only; the order
  stays CANCELLED and the anomaly is logged;
- a repeated outcome for a resolved payment changes nothing; a conflicting
  one is logged as an anomaly.

Payments that never hear back are failed by ``expire_stale_payments``.
"""

from datetime import UTC, datetime, timedelta

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from commerce.gateway.port import PaymentNotification
from commerce.order.workflow import OrderWorkflow
from commerce.payment.payment import Payment
from commerce.payment.webhook import ProcessPaymentWebhook, WebhookResult
from commerce.utils.logging import component_logger

EXPIRED_PAYMENT_ID = "expired"
EXPIRY_MESSAGE = "Payment expired without gateway confirmation"


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


class PaymentReconciler:
    def __init__(self, workflow: OrderWorkflow, logger=None, pending_ttl_minutes: int = 15) -> None:
        self.workflow = workflow
        self.logger = logger or component_logger("payment_reconciler")
        self.pending_ttl_minutes = pending_ttl_minutes

    def handle_webhook(self, event: PaymentNotification) -> WebhookResult:
        """Record the gateway's outcome for ``event.order_id``.

        Raises ``NotFoundError`` when no payment exists for the order.
        """
        order_id = str(event.order_id)
        with self.workflow.locked(order_id):
            result = current_domain.process(
                ProcessPaymentWebhook(
                    order_id=order_id,
                    external_payment_id=event.payment_id,
                    status=event.status,
                    message=event.message,
                ),
                asynchronous=False,
            )

        self._report(event, result)
        return result

    def _report(self, event: PaymentNotification, result: WebhookResult) -> None:
        context = {
            "order_id": str(event.order_id),
            "payment_id": str(result.payment.id),
            "external_payment_id": event.payment_id,
            "status": event.status,
        }
        if not result.payment_updated:
            if result.payment.status == event.status:
                self.logger.info("Duplicate payment notification ignored", **context)
            else:
                self.logger.warning(
                    "Conflicting payment notification ignored",
                    recorded_status=result.payment.status,
                    **context,
                )
            return

        if result.order_updated:
            self.logger.info("Payment reconciled", order_status=result.order.status, **context)
        else:
            self.workflow.report_ignored_outcome(result.order, event.status)

    def expire_stale_payments(self, older_than_minutes: int | None = None, as_of: datetime | None = None) -> int:
        """Fail PENDING payments older than the threshold, and their CREATED orders."""
        as_of = _as_utc(as_of or datetime.now(UTC))
        threshold_minutes = older_than_minutes or self.pending_ttl_minutes
        cutoff = as_of - timedelta(minutes=threshold_minutes)

        self.logger.info(
            "Checking for stale payments",
            cutoff=cutoff.isoformat(),
            threshold_minutes=threshold_minutes,
        )

        pending = current_domain.repository_for(Payment).pending()
        stale = [p for p in pending if p.created_at and _as_utc(p.created_at) <= cutoff]
        if not stale:
            self.logger.info("No stale payments found")
            return 0

        expired_count = 0
        for payment in stale:
            try:
                result = self.handle_webhook(
                    PaymentNotification(
                        order_id=str(payment.order_id),
                        payment_id=EXPIRED_PAYMENT_ID,
                        status="FAILED",
                        message=EXPIRY_MESSAGE,
                    )
                )
            except (ValidationError, ObjectNotFoundError) as exc:
                self.logger.warning(
                    "Failed to expire stale payment",
                    payment_id=str(payment.id),
                    order_id=str(payment.order_id),
                    error=str(exc),
                )
                continue

            if result.payment_updated:
                expired_count += 1

        self.logger.info("Stale payment cleanup complete", expired_count=expired_count)
        return expired_count
