"""OrderWorkflow: checkout, cancellation and payment outcomes for orders.

Checkout reserves stock line by line through the StockLedger. Reservations
and order creation are separate units of work, so a failure after any
reservation is compensated by releasing everything reserved so far before
the error propagates.

Operations on one order (cancel, payment outcome, payment initiation and
webhooks) are serialized through ``locked(order_id)``.
"""

import json
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from commerce.cart.service import CartService
from commerce.catalog.ledger import StockLedger
from commerce.errors import EmptyCartError, InvalidStateError, NotFoundError
from commerce.order.cancellation import CancelOrder
from commerce.order.order import Order, OrderStatus, PaymentOutcome
from commerce.order.payment import ApplyPaymentOutcome
from commerce.order.placement import PlaceOrder
from commerce.payment.payment import Payment
from commerce.utils.locks import KeyedLock
from commerce.utils.logging import component_logger


@dataclass(frozen=True)
class OrderDetails:
    order: Order
    payment: Payment | None


def load_order(order_id) -> Order:
    """Fetch an order or raise ``NotFoundError``."""
    try:
        return current_domain.repository_for(Order).get(str(order_id))
    except ObjectNotFoundError as exc:
        raise NotFoundError("Order", order_id) from exc


class OrderWorkflow:
    def __init__(
        self,
        ledger: StockLedger,
        carts: CartService,
        logger=None,
        locks: KeyedLock | None = None,
    ) -> None:
        self.ledger = ledger
        self.carts = carts
        self.logger = logger or component_logger("order_workflow")
        self._locks = locks if locks is not None else KeyedLock()

    @contextmanager
    def locked(self, order_id) -> Iterator[None]:
        with self._locks.hold(str(order_id)):
            yield

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    def checkout(self, user_id) -> Order:
        """Convert the user's cart into a CREATED order with reserved stock."""
        user_id = str(user_id)
        with self.carts.locked(user_id):
            lines = self.carts.lines(user_id)
            if not lines:
                raise EmptyCartError(user_id)

            reserved = []
            snapshot = []
            try:
                for line in lines:
                    product = self.ledger.reserve(line.product_id, line.quantity)
                    reserved.append((str(line.product_id), line.quantity))
                    snapshot.append(
                        {
                            "product_id": str(product.id),
                            "product_name": product.name,
                            "quantity": line.quantity,
                            "unit_price": product.price,
                        }
                    )

                order = current_domain.process(
                    PlaceOrder(user_id=user_id, lines=json.dumps(snapshot)),
                    asynchronous=False,
                )
            except Exception as exc:
                self.logger.warning(
                    "Checkout failed, releasing reserved stock",
                    user_id=user_id,
                    reserved_lines=len(reserved),
                    error=str(exc),
                )
                self._release_all(reserved, reason="checkout_rollback", user_id=user_id)
                raise

        self.logger.info(
            "Order created",
            order_id=str(order.id),
            user_id=user_id,
            total_amount=order.total_amount,
            line_count=len(snapshot),
        )
        return order

    def _release_all(self, reserved, reason, **context) -> None:
        for product_id, quantity in reversed(reserved):
            try:
                self.ledger.release(product_id, quantity, reason=reason)
            except Exception as exc:
                self.logger.error(
                    "Stock release failed; manual correction needed",
                    product_id=product_id,
                    quantity=quantity,
                    reason=reason,
                    error=str(exc),
                    **context,
                )

    # -------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------
    def cancel(self, order_id) -> Order:
        """Cancel a CREATED order and put its stock back, once per line.

        The status change and every release commit together. If any of them
        fails nothing is written, the order stays CREATED and the error
        propagates.
        """
        order_id = str(order_id)
        with self.locked(order_id):
            order = load_order(order_id)
            if not order.is_open:
                raise InvalidStateError(
                    f"Cannot cancel order with status: {order.status}. Only CREATED orders can be cancelled.",
                    current_status=order.status,
                )

            with self.ledger.holding(line.product_id for line in order.lines):
                try:
                    order = current_domain.process(CancelOrder(order_id=order_id), asynchronous=False)
                except Exception as exc:
                    self.logger.warning(
                        "Cancellation rolled back, order left open",
                        order_id=order_id,
                        error=str(exc),
                    )
                    raise

        self.logger.info("Order cancelled", order_id=order_id, user_id=str(order.user_id))
        return order

    # -------------------------------------------------------------------
    # Payment outcome
    # -------------------------------------------------------------------
    def apply_payment_outcome(self, order_id, outcome, reason=None) -> Order:
        """Set PAID or FAILED on a CREATED order. Stock is left untouched."""
        order_id = str(order_id)
        outcome = PaymentOutcome(outcome)
        with self.locked(order_id):
            load_order(order_id)
            order, applied = current_domain.process(
                ApplyPaymentOutcome(order_id=order_id, outcome=outcome.value, reason=reason),
                asynchronous=False,
            )

        if applied:
            self.logger.info("Payment outcome applied", order_id=order_id, status=order.status)
        else:
            self.report_ignored_outcome(order, outcome)
        return order

    def report_ignored_outcome(self, order, outcome) -> None:
        outcome = PaymentOutcome(outcome)
        if OrderStatus(order.status) == OrderStatus.CANCELLED:
            self.logger.warning(
                "Payment outcome arrived for a cancelled order; order left cancelled",
                order_id=str(order.id),
                outcome=outcome.value,
            )
        else:
            self.logger.warning(
                "Payment outcome ignored, order already settled",
                order_id=str(order.id),
                status=order.status,
                outcome=outcome.value,
            )

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def get(self, order_id) -> OrderDetails:
        order = load_order(order_id)
        payment = current_domain.repository_for(Payment).find_by_order_id(str(order.id))
        return OrderDetails(order=order, payment=payment)

    def orders_for(self, user_id) -> list[Order]:
        return current_domain.repository_for(Order).find_by_user(str(user_id))
