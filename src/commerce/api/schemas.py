"""Pydantic request/response schemas for the commerce API.

These are the external contracts; they are kept separate from the internal
Protean commands and aggregates and built from them with ``from_*`` helpers.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
class AddProductRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    price: float = Field(ge=0)
    stock: int = Field(default=0, ge=0)

    model_config = {
        "json_schema_extra": {
            "examples": [{"name": "Mechanical Keyboard", "description": "Tenkeyless", "price": 89.5, "stock": 25}]
        }
    }


class ChangePriceRequest(BaseModel):
    price: float = Field(ge=0)


class ProductResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    price: float
    stock: int

    @classmethod
    def from_product(cls, product):
        return cls(
            id=str(product.id),
            name=product.name,
            description=product.description,
            price=product.price,
            stock=product.stock,
        )


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    user_id: str = Field(min_length=1)
    product_id: str = Field(min_length=1)
    quantity: int = Field(gt=0)


class CartLineResponse(BaseModel):
    id: str
    user_id: str
    product_id: str
    quantity: int


class CartItemResponse(BaseModel):
    id: str
    product_id: str
    product_name: str
    unit_price: float
    quantity: int
    subtotal: float

    @classmethod
    def from_view(cls, view):
        return cls(
            id=view.line_id,
            product_id=view.product_id,
            product_name=view.product_name,
            unit_price=view.unit_price,
            quantity=view.quantity,
            subtotal=view.subtotal,
        )


class CartResponse(BaseModel):
    user_id: str
    items: list[CartItemResponse]
    total: float


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    user_id: str = Field(min_length=1)


class OrderLineResponse(BaseModel):
    product_id: str
    product_name: str | None = None
    quantity: int
    unit_price: float


class PaymentResponse(BaseModel):
    id: str
    order_id: str
    amount: float
    status: str
    external_payment_id: str
    message: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_payment(cls, payment):
        return cls(
            id=str(payment.id),
            order_id=str(payment.order_id),
            amount=payment.amount,
            status=payment.status,
            external_payment_id=payment.external_payment_id,
            message=payment.message,
            created_at=payment.created_at,
        )


class OrderResponse(BaseModel):
    id: str
    user_id: str
    status: str
    total_amount: float
    created_at: datetime | None = None
    lines: list[OrderLineResponse]
    payment: PaymentResponse | None = None

    @classmethod
    def from_order(cls, order, payment=None):
        return cls(
            id=str(order.id),
            user_id=str(order.user_id),
            status=order.status,
            total_amount=order.total_amount,
            created_at=order.created_at,
            lines=[
                OrderLineResponse(
                    product_id=str(line.product_id),
                    product_name=line.product_name,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                )
                for line in order.lines
            ],
            payment=PaymentResponse.from_payment(payment) if payment else None,
        )


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------
class CreatePaymentRequest(BaseModel):
    order_id: str = Field(min_length=1)
    amount: float = Field(gt=0)


class PaymentWebhookRequest(BaseModel):
    order_id: str = Field(min_length=1)
    payment_id: str = Field(min_length=1)
    status: Literal["SUCCESS", "FAILED"]
    message: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "order_id": "3f1c0a52-8d7e-4f4e-9a61-1f2b3c4d5e6f",
                    "payment_id": "pay_1a2b3c4d",
                    "status": "SUCCESS",
                    "message": "Payment completed successfully",
                }
            ]
        }
    }


class ConfigureGatewayRequest(BaseModel):
    success_rate: float | None = Field(default=None, ge=0, le=1)
    delay_seconds: float | None = Field(default=None, ge=0)


class GatewayConfigResponse(BaseModel):
    gateway: str
    success_rate: float
    delay_seconds: float


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------
class MessageResponse(BaseModel):
    message: str


class ExpirePaymentsRequest(BaseModel):
    older_than_minutes: int | None = Field(default=None, gt=0)


class ExpiredCountResponse(BaseModel):
    expired_count: int
