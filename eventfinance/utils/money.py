"""
Event Finance Manager - Money Helpers

Coercion of loosely typed cost values into Decimal amounts, plus the
variance helpers built on top of it.
"""

import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")


def normalize_amount(value: Any) -> Decimal:
    """
    Coerce a cost value into a Decimal.

    Accepts None, int, float, Decimal, numeric strings and objects that can
    convert themselves to a number (``to_decimal()`` or ``__float__``).
    Never raises: anything unusable becomes 0.
    """
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO

    if isinstance(value, int):
        return Decimal(value)

    if isinstance(value, float):
        if not math.isfinite(value):
            return ZERO
        return Decimal(str(value))

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return ZERO
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            return ZERO
        return parsed if parsed.is_finite() else ZERO

    to_decimal = getattr(value, "to_decimal", None)
    if callable(to_decimal):
        try:
            return normalize_amount(to_decimal())
        except (ArithmeticError, TypeError, ValueError):
            return ZERO

    if hasattr(value, "__float__"):
        try:
            return normalize_amount(float(value))
        except (ArithmeticError, TypeError, ValueError):
            return ZERO

    return ZERO


def calculate_variance(estimated: Any, actual: Any) -> Decimal:
    """Estimated minus actual. Positive is under budget, negative is over."""
    return normalize_amount(estimated) - normalize_amount(actual)


@dataclass(frozen=True)
class VarianceDisplay:
    amount: Decimal
    label: str


def format_variance(variance: Any) -> VarianceDisplay:
    """Absolute amount with an "under"/"over" label. Zero counts as under."""
    value = normalize_amount(variance)
    return VarianceDisplay(
        amount=abs(value),
        label="under" if value >= 0 else "over",
    )
