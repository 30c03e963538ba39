"""Payment gateway factory.

``build_gateway`` picks the adapter named by ``Settings.payment_gateway``:
- ``simulated``: in-process SimulatedGateway delivering to ``deliver``
- ``http``: HttpPaymentGateway talking to the external payment service
"""

from commerce.gateway.http_adapter import HttpPaymentGateway, WebhookSender
from commerce.gateway.port import GatewayReceipt, PaymentGateway, PaymentNotification
from commerce.gateway.simulated import SimulatedGateway
from commerce.settings import GATEWAY_HTTP, Settings

__all__ = [
    "GatewayReceipt",
    "HttpPaymentGateway",
    "PaymentGateway",
    "PaymentNotification",
    "SimulatedGateway",
    "WebhookSender",
    "build_gateway",
]


def build_gateway(settings: Settings, deliver, logger=None) -> PaymentGateway:
    if settings.payment_gateway == GATEWAY_HTTP:
        return HttpPaymentGateway(
            settings.payment_service_url,
            timeout=settings.payment_timeout_seconds,
            logger=logger,
        )
    return SimulatedGateway(
        deliver,
        delay_seconds=settings.payment_delay_seconds,
        success_rate=settings.payment_success_rate,
        logger=logger,
    )
