"""Payment aggregate (CQRS): one payment record per order.

A payment opens as PENDING with the placeholder external id ``"pending"`` and
is resolved exactly once, to SUCCESS or FAILED, by the gateway's webhook (or
by expiry). Outcomes reported after resolution leave the record unchanged.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String

from commerce.domain import commerce
from commerce.payment.events import PaymentFailed, PaymentInitiated, PaymentSucceeded

PENDING_EXTERNAL_ID = "pending"


class PaymentStatus(Enum):
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


@commerce.aggregate
class Payment:
    order_id = Identifier(required=True, unique=True)
    amount = Float(required=True, min_value=0.0)
    status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    external_payment_id = String(max_length=255, default=PENDING_EXTERNAL_ID)
    message = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def resolved_payment_must_carry_external_id(self):
        if self.status != PaymentStatus.PENDING.value and self.external_payment_id in (None, "", PENDING_EXTERNAL_ID):
            raise ValidationError({"external_payment_id": ["A resolved payment needs the gateway's payment id"]})

    @classmethod
    def initiate(cls, order_id, amount):
        if amount is None or amount <= 0:
            raise ValidationError({"amount": ["Payment amount must be positive"]})

        now = datetime.now(UTC)
        payment = cls(
            order_id=order_id,
            amount=amount,
            status=PaymentStatus.PENDING.value,
            external_payment_id=PENDING_EXTERNAL_ID,
            created_at=now,
            updated_at=now,
        )
        payment.raise_(
            PaymentInitiated(
                payment_id=str(payment.id),
                order_id=str(order_id),
                amount=amount,
                initiated_at=now,
            )
        )
        return payment

    @property
    def is_pending(self):
        return PaymentStatus(self.status) == PaymentStatus.PENDING

    def record_outcome(self, status, external_payment_id, message=None):
        """Resolve a PENDING payment. Returns False if it was already resolved."""
        status = PaymentStatus(status)
        if status == PaymentStatus.PENDING:
            raise ValidationError({"status": ["A payment outcome must be SUCCESS or FAILED"]})
        if not self.is_pending:
            return False

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = status.value
            self.external_payment_id = external_payment_id
            self.message = message
            self.updated_at = now

        if status == PaymentStatus.SUCCESS:
            self.raise_(
                PaymentSucceeded(
                    payment_id=str(self.id),
                    order_id=str(self.order_id),
                    external_payment_id=external_payment_id,
                    succeeded_at=now,
                )
            )
        else:
            self.raise_(
                PaymentFailed(
                    payment_id=str(self.id),
                    order_id=str(self.order_id),
                    external_payment_id=external_payment_id,
                    message=message,
                    failed_at=now,
                )
            )
        return True


@commerce.repository(part_of=Payment)
class PaymentRepository:
    def find_by_order_id(self, order_id) -> Payment | None:
        payments = self._dao.query.filter(order_id=str(order_id)).all().items
        return payments[0] if payments else None

    def pending(self) -> list[Payment]:
        return self._dao.query.filter(status=PaymentStatus.PENDING.value).all().items
