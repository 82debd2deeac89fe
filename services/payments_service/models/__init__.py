"""Payments Service models package."""

from services.payments_service.models.core import PaymentAttempt
from services.payments_service.models.enums import (
    IN_FLIGHT_GATEWAY_STATUSES,
    GatewayTransactionStatus,
    PaymentAttemptStatus,
)

__all__ = [
    "IN_FLIGHT_GATEWAY_STATUSES",
    "GatewayTransactionStatus",
    "PaymentAttempt",
    "PaymentAttemptStatus",
]
