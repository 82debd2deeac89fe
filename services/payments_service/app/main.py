"""FastAPI application for the Payments Service."""

from fastapi import FastAPI
from services.payments_service.routers import payments_router, webhooks_router


def create_app() -> FastAPI:
    """Create and configure the Payments Service FastAPI app."""
    app = FastAPI(
        title="BeBrand Payments Service",
        version="0.1.0",
        description="Paystack payments and reconciliation for BeBrand orders.",
    )

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "payments"}

    app.include_router(payments_router)
    app.include_router(webhooks_router)

    return app


app = create_app()
