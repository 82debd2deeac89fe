"""Currency conversion utilities for BeBrand.

Internal gateway unit: minor units (kobo for NGN, 100 kobo = ₦1).
Catalog / display unit: major units held as ``Decimal`` (e.g. Decimal("1500.00")).

Conversion chain
----------------
Major × 100 → Minor   (round half-up at the minor-unit boundary)
Minor ÷ 100 → Major   (exact)
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

# ─── constants ───────────────────────────────────────────────────────────────

MINOR_UNITS_PER_MAJOR: int = 100
CENT: Decimal = Decimal("0.01")

Amount = Union[Decimal, int, float, str]


# ─── conversion helpers ───────────────────────────────────────────────────────


def quantize_major(amount: Amount) -> Decimal:
    """Round a major-unit amount to two places (round half-up)."""
    # str() first so floats like 0.1 convert by their shortest repr, not binary value
    return Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount: Amount) -> int:
    """Convert a major-unit amount to integer minor units. ₦1 = 100 kobo."""
    return int(quantize_major(amount) * MINOR_UNITS_PER_MAJOR)


def from_minor_units(minor: int) -> Decimal:
    """Convert integer minor units back to a major-unit ``Decimal``."""
    return (Decimal(int(minor)) / MINOR_UNITS_PER_MAJOR).quantize(CENT)


def format_amount(amount: Amount, symbol: str = "₦") -> str:
    """Human-readable amount for emails, e.g. ``₦1,500.00``."""
    return f"{symbol}{quantize_major(amount):,.2f}"
