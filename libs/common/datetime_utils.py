"""Datetime utilities for timezone-aware UTC timestamps.

Usage:
    from libs.common.datetime_utils import utc_now

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
"""

from datetime import datetime, timezone
from typing import Any, Optional


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime. Always use this for timestamps in the database."""
    return datetime.now(timezone.utc)


def parse_gateway_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp from a payment provider payload.

    Paystack sends values like ``2025-10-27T10:30:00.000Z``. Returns None for
    missing or unparseable values rather than failing the caller.
    """
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
