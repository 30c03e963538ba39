"""Payment gateway port (abstract interface).

The workflow only ever submits a payment request and later receives a
``PaymentNotification`` through the webhook entry point. Adapters decide how
the request travels: an in-process simulation or an HTTP call to the
external payment service.
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass

PROCESSING = "PROCESSING"


@dataclass(frozen=True)
class GatewayReceipt:
    """Immediate acknowledgement of a submitted payment request."""

    external_payment_id: str
    order_id: str
    status: str = PROCESSING
    message: str | None = None


@dataclass(frozen=True)
class PaymentNotification:
    """Outcome reported by the gateway for an order's payment."""

    order_id: str
    payment_id: str
    status: str
    message: str | None = None

    def to_payload(self) -> dict:
        return asdict(self)


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def submit(self, order_id: str, amount: float, payment_id: str) -> GatewayReceipt:
        """Hand a payment request to the gateway without waiting for its outcome."""
        ...
