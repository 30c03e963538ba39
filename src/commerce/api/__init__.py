"""Commerce HTTP API package."""

from commerce.api.application import create_app
from commerce.api.errors import register_exception_handlers
from commerce.api.routes import (
    cart_router,
    maintenance_router,
    order_router,
    payment_router,
    product_router,
    webhook_router,
)

__all__ = [
    "cart_router",
    "create_app",
    "maintenance_router",
    "order_router",
    "payment_router",
    "product_router",
    "register_exception_handlers",
    "webhook_router",
]
