"""Enum definitions for payments service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class PaymentAttemptStatus(str, enum.Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    ABANDONED = "abandoned"


class GatewayTransactionStatus(str, enum.Enum):
    """Transaction statuses as reported by Paystack's verify endpoint."""

    SUCCESS = "success"
    FAILED = "failed"
    ABANDONED = "abandoned"
    PENDING = "pending"
    ONGOING = "ongoing"
    PROCESSING = "processing"
    QUEUED = "queued"
    REVERSED = "reversed"


# Gateway statuses that mean "not settled yet, ask again later"
IN_FLIGHT_GATEWAY_STATUSES = frozenset(
    {
        GatewayTransactionStatus.PENDING,
        GatewayTransactionStatus.ONGOING,
        GatewayTransactionStatus.PROCESSING,
        GatewayTransactionStatus.QUEUED,
    }
)
