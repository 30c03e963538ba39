"""Mock external payment service.

Stands in for a third-party payment provider: accepts a payment request,
answers PROCESSING immediately, and reports the outcome later by posting to
the commerce webhook (PAYMENT_WEBHOOK_URL). Outcomes follow the same
simulation as the in-process gateway: PAYMENT_DELAY_SECONDS delay, SUCCESS
with probability PAYMENT_SUCCESS_RATE.

Usage:
    uvicorn payment_service:app --app-dir src --port 8081
"""

import structlog
from fastapi import FastAPI
from pydantic import BaseModel, Field

from commerce.gateway.http_adapter import WebhookSender
from commerce.gateway.simulated import SimulatedGateway
from commerce.settings import Settings
from commerce.utils.logging import configure_logging


class PaymentRequest(BaseModel):
    order_id: str = Field(min_length=1)
    amount: float = Field(gt=0)
    payment_id: str | None = None


class PaymentAccepted(BaseModel):
    message: str
    payment_id: str
    order_id: str
    status: str


def create_payment_service(processor: SimulatedGateway) -> FastAPI:
    service = FastAPI(title="Mock Payment Service")
    service.state.processor = processor

    @service.post("/payments/create", response_model=PaymentAccepted)
    async def create_payment(body: PaymentRequest) -> PaymentAccepted:
        receipt = processor.submit(body.order_id, body.amount, body.payment_id or "")
        return PaymentAccepted(
            message="Payment processing started",
            payment_id=receipt.external_payment_id,
            order_id=receipt.order_id,
            status=receipt.status,
        )

    @service.get("/health")
    async def health():
        return {"status": "ok", "success_rate": processor.success_rate, "delay_seconds": processor.delay_seconds}

    return service


def build_processor(settings: Settings) -> SimulatedGateway:
    logger = structlog.get_logger("payment_service")
    return SimulatedGateway(
        WebhookSender(
            settings.payment_webhook_url,
            timeout=settings.payment_timeout_seconds,
            logger=logger.bind(component="webhook_sender"),
        ),
        delay_seconds=settings.payment_delay_seconds,
        success_rate=settings.payment_success_rate,
        logger=logger.bind(component="processor"),
    )


configure_logging()
app = create_payment_service(build_processor(Settings.from_env()))
