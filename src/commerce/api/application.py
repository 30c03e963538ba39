"""FastAPI application factory for the commerce service."""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from commerce.api.errors import register_exception_handlers
from commerce.api.routes import (
    cart_router,
    maintenance_router,
    order_router,
    payment_router,
    product_router,
    webhook_router,
)
from commerce.container import Commerce


def create_app(services: Commerce) -> FastAPI:
    """Build the HTTP app around an already initialized ``Commerce`` container."""
    app = FastAPI(
        title="Commerce API",
        description="Carts, checkout with stock reservation, and asynchronous payments",
    )
    app.state.commerce = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the commerce domain context for each request."""
        with services.domain.domain_context():
            return await call_next(request)

    for router in (product_router, cart_router, order_router, payment_router, webhook_router, maintenance_router):
        app.include_router(router)
    register_exception_handlers(app)

    @app.get("/health")
    async def health():
        return JSONResponse(
            content={
                "status": "ok",
                "domain": services.domain.name,
                "gateway": type(services.gateway).__name__,
            }
        )

    return app
