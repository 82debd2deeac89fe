"""Payments Service schemas package."""

from services.payments_service.schemas.main import (
    InitializePaymentRequest,
    PaymentAttemptListResponse,
    PaymentAttemptResponse,
    ReconciliationResponse,
    VerifyPaymentRequest,
)

__all__ = [
    "InitializePaymentRequest",
    "PaymentAttemptListResponse",
    "PaymentAttemptResponse",
    "ReconciliationResponse",
    "VerifyPaymentRequest",
]
