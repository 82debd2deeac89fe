"""Rate limiting configuration for the BeBrand API.

Uses slowapi; storage defaults to in-process memory and can point at Redis
through RATE_LIMIT_STORAGE_URI when several instances run.
"""

from functools import lru_cache
from typing import Callable

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from libs.common.config import get_settings


def _get_client_ip(request: Request) -> str:
    """
    Get client IP from request, handling proxies.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # First IP in the chain is the original client
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


@lru_cache
def get_limiter() -> Limiter:
    """Create and return the cached Limiter instance."""
    settings = get_settings()
    return Limiter(
        key_func=_get_client_ip,
        default_limits=["100/minute"],
        storage_uri=settings.RATE_LIMIT_STORAGE_URI,
        strategy="fixed-window",
        enabled=settings.RATE_LIMIT_ENABLED,
    )


limiter = get_limiter()


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """
    Render rate limit errors in the same shape as other API errors.
    """
    return JSONResponse(
        status_code=429,
        content={
            "detail": f"Rate limit exceeded: {exc.detail}",
            "code": "RATE_LIMIT_EXCEEDED",
            "request_id": getattr(request.state, "request_id", None),
        },
        headers={"Retry-After": "60"},
    )


def payment_limit(func: Callable) -> Callable:
    """Apply strict rate limit for payment endpoints (10/minute)."""
    return limiter.limit("10/minute")(func)


def checkout_limit(func: Callable) -> Callable:
    """Apply rate limit for order placement (20/minute)."""
    return limiter.limit("20/minute")(func)
