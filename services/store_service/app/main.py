"""FastAPI application for the Store Service."""

from fastapi import FastAPI
from services.store_service.routers import admin_orders_router, orders_router


def create_app() -> FastAPI:
    """Create and configure the Store Service FastAPI app."""
    app = FastAPI(
        title="BeBrand Store Service",
        version="0.1.0",
        description="Checkout and order management for BeBrand.",
    )

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "store"}

    app.include_router(orders_router)
    app.include_router(admin_orders_router, prefix="/admin")

    return app


app = create_app()
