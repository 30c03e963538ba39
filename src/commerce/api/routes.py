"""FastAPI routes for the commerce service: catalogue, cart, orders and payments.

Routes translate HTTP payloads into calls on the ``Commerce`` components;
domain errors are mapped to responses by ``commerce.api.errors``.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from commerce.api.schemas import (
    AddProductRequest,
    AddToCartRequest,
    CartItemResponse,
    CartLineResponse,
    CartResponse,
    ChangePriceRequest,
    CheckoutRequest,
    ConfigureGatewayRequest,
    CreatePaymentRequest,
    ExpiredCountResponse,
    ExpirePaymentsRequest,
    GatewayConfigResponse,
    MessageResponse,
    OrderResponse,
    PaymentResponse,
    PaymentWebhookRequest,
    ProductResponse,
)
from commerce.container import Commerce
from commerce.gateway.port import PaymentNotification
from commerce.gateway.simulated import SimulatedGateway


def get_commerce(request: Request) -> Commerce:
    return request.app.state.commerce


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, response_model=ProductResponse)
async def add_product(body: AddProductRequest, services: Commerce = Depends(get_commerce)) -> ProductResponse:
    product = services.catalog.add_product(
        name=body.name,
        price=body.price,
        stock=body.stock,
        description=body.description,
    )
    return ProductResponse.from_product(product)


@product_router.get("", response_model=list[ProductResponse])
async def list_products(services: Commerce = Depends(get_commerce)) -> list[ProductResponse]:
    return [ProductResponse.from_product(p) for p in services.catalog.listing()]


@product_router.get("/search", response_model=list[ProductResponse])
async def search_products(q: str = Query(min_length=1), services: Commerce = Depends(get_commerce)):
    return [ProductResponse.from_product(p) for p in services.catalog.search(q)]


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, services: Commerce = Depends(get_commerce)) -> ProductResponse:
    return ProductResponse.from_product(services.catalog.get(product_id))


@product_router.patch("/{product_id}/price", response_model=ProductResponse)
async def change_price(
    product_id: str, body: ChangePriceRequest, services: Commerce = Depends(get_commerce)
) -> ProductResponse:
    return ProductResponse.from_product(services.catalog.change_price(product_id, body.price))


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.post("/add", status_code=201, response_model=CartLineResponse)
async def add_to_cart(body: AddToCartRequest, services: Commerce = Depends(get_commerce)) -> CartLineResponse:
    line = services.carts.add_item(body.user_id, body.product_id, body.quantity)
    return CartLineResponse(
        id=str(line.id),
        user_id=body.user_id,
        product_id=str(line.product_id),
        quantity=line.quantity,
    )


@cart_router.get("/{user_id}", response_model=CartResponse)
async def get_cart(user_id: str, services: Commerce = Depends(get_commerce)) -> CartResponse:
    items = [CartItemResponse.from_view(view) for view in services.carts.list_items(user_id)]
    return CartResponse(user_id=user_id, items=items, total=round(sum(i.subtotal for i in items), 2))


@cart_router.delete("/{user_id}/clear", response_model=MessageResponse)
async def clear_cart(user_id: str, services: Commerce = Depends(get_commerce)) -> MessageResponse:
    services.carts.clear(user_id)
    return MessageResponse(message="Cart cleared successfully")


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def checkout(body: CheckoutRequest, services: Commerce = Depends(get_commerce)) -> OrderResponse:
    """Place an order from the user's cart."""
    order = services.orders.checkout(body.user_id)
    return OrderResponse.from_order(order)


@order_router.get("/user/{user_id}", response_model=list[OrderResponse])
async def orders_for_user(user_id: str, services: Commerce = Depends(get_commerce)) -> list[OrderResponse]:
    return [OrderResponse.from_order(order) for order in services.orders.orders_for(user_id)]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, services: Commerce = Depends(get_commerce)) -> OrderResponse:
    details = services.orders.get(order_id)
    return OrderResponse.from_order(details.order, details.payment)


@order_router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(order_id: str, services: Commerce = Depends(get_commerce)) -> OrderResponse:
    order = services.orders.cancel(order_id)
    return OrderResponse.from_order(order)


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/create", status_code=201, response_model=PaymentResponse)
async def create_payment(body: CreatePaymentRequest, services: Commerce = Depends(get_commerce)) -> PaymentResponse:
    payment = services.payments.initiate_payment(body.order_id, body.amount)
    return PaymentResponse.from_payment(payment)


@payment_router.get("/order/{order_id}", response_model=PaymentResponse)
async def payment_for_order(order_id: str, services: Commerce = Depends(get_commerce)) -> PaymentResponse:
    return PaymentResponse.from_payment(services.payments.payment_for(order_id))


@payment_router.post("/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(
    body: ConfigureGatewayRequest, services: Commerce = Depends(get_commerce)
) -> GatewayConfigResponse:
    """Adjust the simulated gateway (non-production only)."""
    if services.settings.is_production:
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")
    if not isinstance(services.gateway, SimulatedGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for SimulatedGateway")

    services.gateway.configure(success_rate=body.success_rate, delay_seconds=body.delay_seconds)
    return GatewayConfigResponse(
        gateway=type(services.gateway).__name__,
        success_rate=services.gateway.success_rate,
        delay_seconds=services.gateway.delay_seconds,
    )


# ---------------------------------------------------------------------------
# Webhook Router
# ---------------------------------------------------------------------------
webhook_router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@webhook_router.post("/payment", response_model=PaymentResponse)
async def payment_webhook(body: PaymentWebhookRequest, services: Commerce = Depends(get_commerce)) -> PaymentResponse:
    """Inbound outcome from the payment gateway."""
    result = services.reconciler.handle_webhook(
        PaymentNotification(
            order_id=body.order_id,
            payment_id=body.payment_id,
            status=body.status,
            message=body.message,
        )
    )
    return PaymentResponse.from_payment(result.payment)


# ---------------------------------------------------------------------------
# Maintenance Router
# ---------------------------------------------------------------------------
maintenance_router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@maintenance_router.post("/expire-payments", response_model=ExpiredCountResponse)
async def expire_payments(
    body: ExpirePaymentsRequest | None = None, services: Commerce = Depends(get_commerce)
) -> ExpiredCountResponse:
    """Fail payments stuck in PENDING. Meant to be called by a scheduler."""
    older_than = body.older_than_minutes if body else None
    return ExpiredCountResponse(expired_count=services.reconciler.expire_stale_payments(older_than_minutes=older_than))
