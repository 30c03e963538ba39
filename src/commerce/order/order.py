"""Order aggregate (CQRS): placed from a cart, then driven by payment or cancellation.

State Machine:
    CREATED → PAID       (payment succeeded)
    CREATED → FAILED     (payment failed)
    CREATED → CANCELLED  (user cancelled; stock is released in the same unit of work)

All three target states are terminal. Order lines are a price snapshot taken
at checkout and are never edited afterwards.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from commerce.domain import commerce
from commerce.errors import InvalidStateError
from commerce.order.events import OrderCancelled, OrderCreated, OrderPaid, OrderPaymentFailed


class OrderStatus(Enum):
    CREATED = "CREATED"
    PAID = "PAID"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class PaymentOutcome(Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


_VALID_TRANSITIONS = {
    OrderStatus.CREATED: {OrderStatus.PAID, OrderStatus.FAILED, OrderStatus.CANCELLED},
    OrderStatus.PAID: set(),
    OrderStatus.FAILED: set(),
    OrderStatus.CANCELLED: set(),
}


@commerce.entity(part_of="Order")
class OrderLine:
    product_id = Identifier(required=True)
    product_name = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)

    @property
    def subtotal(self):
        return self.unit_price * self.quantity


@commerce.aggregate
class Order:
    user_id = Identifier(required=True)
    lines = HasMany(OrderLine)
    total_amount = Float(required=True, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.CREATED.value)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id, lines):
        """Place an order from a priced snapshot of cart lines.

        Args:
            user_id: Owner of the order.
            lines: Dicts with product_id, product_name, quantity and
                unit_price as read while reserving stock.
        """
        if not lines:
            raise ValidationError({"lines": ["An order needs at least one line"]})

        now = datetime.now(UTC)
        total = sum(line["unit_price"] * line["quantity"] for line in lines)
        order = cls(
            user_id=user_id,
            total_amount=total,
            status=OrderStatus.CREATED.value,
            created_at=now,
            updated_at=now,
        )
        for line in lines:
            order.add_lines(
                OrderLine(
                    product_id=line["product_id"],
                    product_name=line.get("product_name"),
                    quantity=line["quantity"],
                    unit_price=line["unit_price"],
                )
            )

        order.raise_(
            OrderCreated(
                order_id=str(order.id),
                user_id=str(user_id),
                lines=json.dumps(lines),
                line_count=len(lines),
                total_amount=order.total_amount,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------
    @property
    def is_open(self):
        return OrderStatus(self.status) == OrderStatus.CREATED

    def _assert_can_transition(self, target):
        current = OrderStatus(self.status)
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidStateError(
                f"Cannot transition from {current.value} to {target.value}",
                current_status=current.value,
            )

    def cancel(self):
        current = OrderStatus(self.status)
        if current != OrderStatus.CREATED:
            raise InvalidStateError(
                f"Cannot cancel order with status: {current.value}. Only CREATED orders can be cancelled.",
                current_status=current.value,
            )

        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.updated_at = now
        self.raise_(OrderCancelled(order_id=str(self.id), user_id=str(self.user_id), cancelled_at=now))

    def apply_payment_outcome(self, outcome, reason=None):
        """Move a CREATED order to PAID or FAILED.

        Returns False, changing nothing, when the order has already left
        CREATED (a late or repeated outcome); the caller decides how to
        report it.
        """
        outcome = PaymentOutcome(outcome)
        if not self.is_open:
            return False

        now = datetime.now(UTC)
        if outcome == PaymentOutcome.SUCCESS:
            self._assert_can_transition(OrderStatus.PAID)
            self.status = OrderStatus.PAID.value
            self.raise_(OrderPaid(order_id=str(self.id), total_amount=self.total_amount, paid_at=now))
        else:
            self._assert_can_transition(OrderStatus.FAILED)
            self.status = OrderStatus.FAILED.value
            self.raise_(OrderPaymentFailed(order_id=str(self.id), reason=reason, failed_at=now))

        self.updated_at = now
        return True


@commerce.repository(part_of=Order)
class OrderRepository:
    def find_by_user(self, user_id) -> list[Order]:
        """The user's orders, newest first."""
        orders = self._dao.query.filter(user_id=str(user_id)).all().items
        return sorted(orders, key=lambda o: o.created_at, reverse=True)
