"""Simulated asynchronous payment gateway.

Accepts a request, answers PROCESSING straight away and, on a background
thread, waits ``delay_seconds`` before resolving the payment to SUCCESS with
probability ``success_rate`` (FAILED otherwise). The outcome is handed to
``deliver``, which is either the in-process reconciler or a webhook sender.
"""

import random
import threading
import time
from collections import deque
from collections.abc import Callable
from uuid import uuid4

from commerce.gateway.port import GatewayReceipt, PaymentGateway, PaymentNotification
from commerce.utils.logging import component_logger

SUCCESS_MESSAGE = "Payment completed successfully"
FAILURE_MESSAGE = "Payment failed"


class SimulatedGateway(PaymentGateway):
    def __init__(
        self,
        deliver: Callable[[PaymentNotification], object],
        delay_seconds: float = 3.0,
        success_rate: float = 0.9,
        rng: random.Random | None = None,
        logger=None,
        history: int = 100,
    ) -> None:
        self.deliver = deliver
        self.delay_seconds = delay_seconds
        self.success_rate = success_rate
        self.logger = logger or component_logger("simulated_gateway")
        # Recent activity only
        self.calls: deque[dict] = deque(maxlen=history)
        self.delivered: deque[PaymentNotification] = deque(maxlen=history)
        self._rng = rng or random.Random()
        self._lock = threading.Lock()
        self._threads: list[threading.Thread] = []

    def configure(self, success_rate: float | None = None, delay_seconds: float | None = None) -> None:
        """Change the simulation at runtime (non-production only)."""
        if success_rate is not None:
            if not 0.0 <= success_rate <= 1.0:
                raise ValueError("success_rate must be between 0 and 1")
            self.success_rate = success_rate
        if delay_seconds is not None:
            if delay_seconds < 0:
                raise ValueError("delay_seconds must not be negative")
            self.delay_seconds = delay_seconds

    def submit(self, order_id: str, amount: float, payment_id: str) -> GatewayReceipt:
        external_id = f"pay_{uuid4().hex[:8]}"
        with self._lock:
            self.calls.append(
                {
                    "order_id": str(order_id),
                    "amount": amount,
                    "payment_id": str(payment_id),
                    "external_payment_id": external_id,
                }
            )

        worker = threading.Thread(
            target=self._process,
            args=(str(order_id), external_id),
            name=f"payment-{external_id}",
            daemon=True,
        )
        with self._lock:
            self._threads = [t for t in self._threads if t.is_alive()]
            self._threads.append(worker)
        worker.start()

        self.logger.info("Payment accepted for processing", order_id=str(order_id), external_payment_id=external_id)
        return GatewayReceipt(
            external_payment_id=external_id,
            order_id=str(order_id),
            message="Payment processing started",
        )

    def _resolve(self) -> bool:
        with self._lock:
            return self._rng.random() < self.success_rate

    def _process(self, order_id: str, external_id: str) -> None:
        if self.delay_seconds:
            time.sleep(self.delay_seconds)

        succeeded = self._resolve()
        notification = PaymentNotification(
            order_id=order_id,
            payment_id=external_id,
            status="SUCCESS" if succeeded else "FAILED",
            message=SUCCESS_MESSAGE if succeeded else FAILURE_MESSAGE,
        )
        # Nothing above this thread can catch a delivery error
        try:
            self.deliver(notification)
        except Exception:
            self.logger.exception(
                "Payment notification delivery failed",
                order_id=order_id,
                external_payment_id=external_id,
                status=notification.status,
            )
            return

        with self._lock:
            self.delivered.append(notification)
        self.logger.info(
            "Payment notification delivered",
            order_id=order_id,
            external_payment_id=external_id,
            status=notification.status,
        )

    def join(self, timeout: float | None = None) -> bool:
        """Wait for outstanding deliveries. Returns True if none is left running."""
        with self._lock:
            threads = list(self._threads)
        deadline = None if timeout is None else time.monotonic() + timeout
        for thread in threads:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            thread.join(remaining)
        with self._lock:
            self._threads = [t for t in self._threads if t.is_alive()]
            return not self._threads
