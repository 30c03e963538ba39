"""HTTP payment gateway adapter and webhook sender (httpx).

``HttpPaymentGateway`` submits payment requests to the external payment
service; ``WebhookSender`` is the other direction, used by the payment
service to post outcomes back to the commerce webhook.
"""

import httpx

from commerce.gateway.port import PROCESSING, GatewayReceipt, PaymentGateway, PaymentNotification
from commerce.utils.logging import component_logger


class HttpPaymentGateway(PaymentGateway):
    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        client: httpx.Client | None = None,
        logger=None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.logger = logger or component_logger("http_gateway")
        self._client = client or httpx.Client(timeout=timeout)

    def submit(self, order_id: str, amount: float, payment_id: str) -> GatewayReceipt:
        """POST the request to ``/payments/create``; raises ``httpx.HTTPError`` on failure."""
        url = f"{self.base_url}/payments/create"
        response = self._client.post(
            url,
            json={"order_id": str(order_id), "amount": amount, "payment_id": str(payment_id)},
        )
        response.raise_for_status()
        body = response.json()

        self.logger.info(
            "Payment request sent",
            order_id=str(order_id),
            external_payment_id=body.get("payment_id"),
            status=body.get("status"),
        )
        return GatewayReceipt(
            external_payment_id=body["payment_id"],
            order_id=body.get("order_id", str(order_id)),
            status=body.get("status", PROCESSING),
            message=body.get("message"),
        )

    def close(self) -> None:
        self._client.close()


class WebhookSender:
    """Posts payment notifications to the commerce webhook endpoint."""

    def __init__(self, url: str, timeout: float = 5.0, client: httpx.Client | None = None, logger=None) -> None:
        self.url = url
        self.logger = logger or component_logger("webhook_sender")
        self._client = client or httpx.Client(timeout=timeout)

    def __call__(self, notification: PaymentNotification) -> None:
        response = self._client.post(self.url, json=notification.to_payload())
        response.raise_for_status()
        self.logger.info(
            "Webhook sent",
            order_id=notification.order_id,
            status=notification.status,
            http_status=response.status_code,
        )

    def close(self) -> None:
        self._client.close()
