"""FastAPI application entrypoint for the BeBrand API.

Serves the store and payments routers from one process; both share the
database and the middleware stack below.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.payments_service.routers import payments_router, webhooks_router
from services.store_service.routers import admin_orders_router, orders_router


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    settings = get_settings()
    app = FastAPI(
        title="BeBrand API",
        version="0.1.0",
        description="Order placement and Paystack payment reconciliation.",
    )

    # Add rate limiter state to app
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list({*settings.CORS_ORIGINS, settings.FRONTEND_URL}),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    # Add global exception handlers for consistent error responses
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple readiness endpoint."""
        return {"status": "ok"}

    # Store
    app.include_router(orders_router)
    app.include_router(admin_orders_router, prefix="/admin")

    # Payments
    app.include_router(payments_router)
    app.include_router(webhooks_router)

    return app


app = create_app()
