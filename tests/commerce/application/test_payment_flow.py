"""Application tests for payment initiation, webhooks and expiry."""

from datetime import UTC, datetime, timedelta

import httpx
import pytest
from commerce.errors import DuplicatePaymentError, InvalidStateError, NotFoundError
from commerce.gateway.port import PaymentNotification
from commerce.order.order import Order, OrderStatus
from commerce.payment.payment import PENDING_EXTERNAL_ID, PaymentStatus
from commerce.payment.reconciler import EXPIRED_PAYMENT_ID


@pytest.fixture()
def order(carts, workflow, make_product):
    product = make_product(price=10.0, stock=5)
    carts.add_item("user-1", product.id, 3)
    return workflow.checkout("user-1")


def _webhook(order, status="SUCCESS", payment_id="pay_1a2b3c4d", message=None):
    return PaymentNotification(order_id=str(order.id), payment_id=payment_id, status=status, message=message)


class TestInitiatePayment:
    def test_creates_pending_payment(self, payments, order):
        payment = payments.initiate_payment(order.id, 30.0)
        assert payment.status == PaymentStatus.PENDING.value
        assert payment.external_payment_id == PENDING_EXTERNAL_ID
        assert str(payment.order_id) == str(order.id)
        assert payment.amount == 30.0

    def test_submits_to_gateway(self, payments, gateway, order):
        payment = payments.initiate_payment(order.id, 30.0)
        assert gateway.calls == [{"order_id": str(order.id), "amount": 30.0, "payment_id": str(payment.id)}]

    def test_duplicate_payment(self, payments, gateway, order):
        payments.initiate_payment(order.id, 30.0)
        with pytest.raises(DuplicatePaymentError):
            payments.initiate_payment(order.id, 30.0)
        assert len(gateway.calls) == 1

    def test_unknown_order(self, payments):
        with pytest.raises(NotFoundError):
            payments.initiate_payment("missing-order", 30.0)

    def test_cancelled_order(self, payments, workflow, order):
        workflow.cancel(order.id)
        with pytest.raises(InvalidStateError, match="Current status: CANCELLED"):
            payments.initiate_payment(order.id, 30.0)

    def test_gateway_failure_does_not_fail_creation(self, payments, gateway, order):
        gateway.fail_with(httpx.ConnectError("connection refused"))
        payment = payments.initiate_payment(order.id, 30.0)
        assert payment.status == PaymentStatus.PENDING.value
        assert payments.payment_for(order.id).id == payment.id

    def test_payment_for_unknown_order(self, payments):
        with pytest.raises(NotFoundError):
            payments.payment_for("missing-order")


class TestWebhook:
    def test_success_marks_payment_and_order(self, payments, reconciler, workflow, order):
        payments.initiate_payment(order.id, 30.0)

        reconciler.handle_webhook(_webhook(order, "SUCCESS", message="Payment completed successfully"))

        details = workflow.get(order.id)
        assert details.order.status == OrderStatus.PAID.value
        assert details.payment.status == PaymentStatus.SUCCESS.value
        assert details.payment.external_payment_id == "pay_1a2b3c4d"
        assert details.payment.message == "Payment completed successfully"

    def test_failure_marks_payment_and_order(self, payments, reconciler, workflow, order):
        payments.initiate_payment(order.id, 30.0)

        reconciler.handle_webhook(_webhook(order, "FAILED", message="Payment failed"))

        details = workflow.get(order.id)
        assert details.order.status == OrderStatus.FAILED.value
        assert details.payment.status == PaymentStatus.FAILED.value

    def test_unknown_order(self, reconciler):
        with pytest.raises(NotFoundError):
            reconciler.handle_webhook(
                PaymentNotification(order_id="missing-order", payment_id="pay_x", status="SUCCESS")
            )

    def test_order_without_payment(self, reconciler, order):
        with pytest.raises(NotFoundError):
            reconciler.handle_webhook(_webhook(order))

    def test_duplicate_webhook_is_a_no_op(self, payments, reconciler, workflow, order):
        payments.initiate_payment(order.id, 30.0)
        reconciler.handle_webhook(_webhook(order, "SUCCESS"))

        result = reconciler.handle_webhook(_webhook(order, "SUCCESS"))

        assert result.payment_updated is False
        assert workflow.get(order.id).order.status == OrderStatus.PAID.value

    def test_conflicting_webhook_is_ignored(self, payments, reconciler, workflow, order):
        payments.initiate_payment(order.id, 30.0)
        reconciler.handle_webhook(_webhook(order, "FAILED"))

        result = reconciler.handle_webhook(_webhook(order, "SUCCESS", payment_id="pay_other"))

        details = workflow.get(order.id)
        assert result.payment_updated is False
        assert details.payment.status == PaymentStatus.FAILED.value
        assert details.order.status == OrderStatus.FAILED.value

    def test_late_success_after_cancellation_keeps_order_cancelled(
        self, payments, reconciler, workflow, order, stock_of, catalog
    ):
        payments.initiate_payment(order.id, 30.0)
        workflow.cancel(order.id)

        result = reconciler.handle_webhook(_webhook(order, "SUCCESS"))

        details = workflow.get(order.id)
        assert result.payment_updated is True
        assert result.order_updated is False
        assert details.payment.status == PaymentStatus.SUCCESS.value
        assert details.order.status == OrderStatus.CANCELLED.value
        assert stock_of(catalog.get(order.lines[0].product_id)) == 5

    def test_order_write_failure_leaves_payment_pending(self, payments, reconciler, workflow, order, monkeypatch):
        payments.initiate_payment(order.id, 30.0)

        def _explode(self, outcome, reason=None):
            raise RuntimeError("order store unavailable")

        monkeypatch.setattr(Order, "apply_payment_outcome", _explode)

        with pytest.raises(RuntimeError, match="order store unavailable"):
            reconciler.handle_webhook(_webhook(order, "SUCCESS"))

        details = workflow.get(order.id)
        assert details.payment.status == PaymentStatus.PENDING.value
        assert details.payment.external_payment_id == PENDING_EXTERNAL_ID
        assert details.order.status == OrderStatus.CREATED.value

    def test_webhook_can_be_redelivered_after_a_failed_write(
        self, payments, reconciler, workflow, order, monkeypatch
    ):
        payments.initiate_payment(order.id, 30.0)

        def _explode(self, outcome, reason=None):
            raise RuntimeError("order store unavailable")

        monkeypatch.setattr(Order, "apply_payment_outcome", _explode)
        with pytest.raises(RuntimeError):
            reconciler.handle_webhook(_webhook(order, "SUCCESS"))
        monkeypatch.undo()

        result = reconciler.handle_webhook(_webhook(order, "SUCCESS"))

        assert result.payment_updated is True
        assert workflow.get(order.id).order.status == OrderStatus.PAID.value


class TestExpireStalePayments:
    def test_expires_old_pending_payment(self, payments, reconciler, workflow, order):
        payments.initiate_payment(order.id, 30.0)

        expired = reconciler.expire_stale_payments(as_of=datetime.now(UTC) + timedelta(minutes=16))

        details = workflow.get(order.id)
        assert expired == 1
        assert details.payment.status == PaymentStatus.FAILED.value
        assert details.payment.external_payment_id == EXPIRED_PAYMENT_ID
        assert details.order.status == OrderStatus.FAILED.value

    def test_recent_payment_is_left_alone(self, payments, reconciler, workflow, order):
        payments.initiate_payment(order.id, 30.0)

        assert reconciler.expire_stale_payments() == 0
        assert workflow.get(order.id).payment.status == PaymentStatus.PENDING.value

    def test_custom_threshold(self, payments, reconciler, order):
        payments.initiate_payment(order.id, 30.0)
        as_of = datetime.now(UTC) + timedelta(minutes=2)
        assert reconciler.expire_stale_payments(older_than_minutes=1, as_of=as_of) == 1

    def test_resolved_payments_are_not_expired(self, payments, reconciler, order):
        payments.initiate_payment(order.id, 30.0)
        reconciler.handle_webhook(_webhook(order, "SUCCESS"))
        assert reconciler.expire_stale_payments(as_of=datetime.now(UTC) + timedelta(days=1)) == 0
