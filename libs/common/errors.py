"""Domain exceptions shared by the store and payments services.

Services raise these; ``libs.common.error_handler`` renders them as JSON
responses with the status code and machine-readable ``code`` carried here.
"""

from typing import Any, Optional


class AppError(Exception):
    """Base class for errors that map onto a client-visible response."""

    status_code: int = 400
    code: str = "APP_ERROR"

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.context = context
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.context:
            body["context"] = self.context
        return body


class BadRequest(AppError):
    status_code = 400
    code = "BAD_REQUEST"


class NotFound(AppError):
    status_code = 404
    code = "NOT_FOUND"


class ProductNotFound(NotFound):
    code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: Any):
        super().__init__(
            f"Product with ID {product_id} not found", product_id=str(product_id)
        )


class OrderNotFound(NotFound):
    code = "ORDER_NOT_FOUND"

    def __init__(self, order_id: Any):
        super().__init__(f"Order with ID {order_id} not found", order_id=str(order_id))


class PaymentNotFound(NotFound):
    code = "PAYMENT_NOT_FOUND"

    def __init__(self, payment_id: Any):
        super().__init__(
            f"Payment with ID {payment_id} not found", payment_id=str(payment_id)
        )


class InsufficientStock(AppError):
    """Requested quantity exceeds what the catalog can supply."""

    status_code = 409
    code = "INSUFFICIENT_STOCK"

    def __init__(self, product_name: str, available: int, requested: int):
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for product {product_name}. "
            f"Available: {available}, Requested: {requested}",
            product_name=product_name,
            available=available,
            requested=requested,
        )


class InvalidStatusTransition(AppError):
    status_code = 409
    code = "INVALID_STATUS_TRANSITION"

    def __init__(self, current: str, target: str):
        super().__init__(
            f"Cannot move order from {current} to {target}",
            current=current,
            target=target,
        )


class GatewayUnavailable(AppError):
    """The payment provider could not be reached; safe to retry."""

    status_code = 503
    code = "GATEWAY_UNAVAILABLE"


class PaymentFailed(AppError):
    """The provider definitively reports the transaction did not succeed."""

    status_code = 402
    code = "PAYMENT_FAILED"

    def __init__(self, reference: str, gateway_status: Optional[str] = None):
        self.reference = reference
        self.gateway_status = gateway_status
        super().__init__(
            f"Payment was not successful (status={gateway_status or 'unknown'})",
            reference=reference,
            gateway_status=gateway_status,
        )


class PaymentAmountMismatch(AppError):
    status_code = 409
    code = "PAYMENT_AMOUNT_MISMATCH"

    def __init__(self, reference: str, expected: int, received: int):
        super().__init__(
            f"Amount mismatch: got {received}, expected {expected}",
            reference=reference,
            expected=expected,
            received=received,
        )


class PaymentReferenceConflict(AppError):
    status_code = 409
    code = "PAYMENT_REFERENCE_CONFLICT"
