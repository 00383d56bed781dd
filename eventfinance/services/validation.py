"""
Event Finance Manager - Input Validation Helpers

Services collect every field problem first and raise once, so nothing is
persisted when any field is invalid.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from eventfinance.utils.error_handling import (
    InvalidAmountException,
    InvalidCategoryException,
    ValidationException,
)


class FieldErrors:
    """Accumulates ``{"field", "message"}`` problems for one request."""

    def __init__(self):
        self.errors: List[Dict[str, str]] = []
        self._kinds: List[Optional[str]] = []
        self._values: List[Any] = []

    def add(self, field: str, message: str, kind: Optional[str] = None, value: Any = None) -> None:
        self.errors.append({"field": field, "message": message})
        self._kinds.append(kind)
        self._values.append(value)

    def __bool__(self) -> bool:
        return bool(self.errors)

    def raise_if_any(self, message: str, allowed_categories: Optional[List[str]] = None) -> None:
        if not self.errors:
            return
        if len(self.errors) == 1:
            field = self.errors[0]["field"]
            kind = self._kinds[0]
            if kind == "amount":
                raise InvalidAmountException(
                    self._values[0], field=field, message=self.errors[0]["message"]
                )
            if kind == "category" and allowed_categories is not None:
                raise InvalidCategoryException(self._values[0], allowed_categories, field=field)
        raise ValidationException(message, errors=self.errors)


def clean_text(value: Any) -> Optional[str]:
    """Strip strings; blank becomes None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# Numeric(12, 2) storage: two decimal places, ten integer digits
MONEY_QUANTUM = Decimal("0.01")
MAX_MONEY = Decimal("9999999999.99")


def parse_decimal(value: Any) -> Optional[Decimal]:
    """
    Strict money parsing for user input.

    Unlike normalize_amount this rejects junk instead of reading it as 0.
    Values are rounded half up to cents, so sign checks must run on the
    result. Raises ValueError, worded to follow the field label, for
    anything that is not a finite number or does not fit the money columns.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("must be a number")
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = Decimal(str(value))
    elif isinstance(value, str):
        if not value.strip():
            return None
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError("must be a number")
    else:
        raise ValueError("must be a number")
    if not parsed.is_finite():
        raise ValueError("must be a number")
    if abs(parsed) > MAX_MONEY:
        raise ValueError(f"must not exceed {MAX_MONEY:,}")
    return parsed.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def parse_enum(enum_cls: Type[Enum], value: Any) -> Enum:
    """Exact value lookup. Raises ValueError when the value is not a member."""
    if isinstance(value, enum_cls):
        return value
    return enum_cls(value)


def enum_values(enum_cls: Type[Enum]) -> List[str]:
    return [member.value for member in enum_cls]


def check_cost(errors: FieldErrors, data: Dict[str, Any], field: str, label: str) -> Optional[Decimal]:
    """Optional non-negative cost; records an error and returns None when invalid."""
    if field not in data:
        return None
    raw = data[field]
    try:
        amount = parse_decimal(raw)
    except ValueError as exc:
        errors.add(field, f"{label} {exc}", kind="amount", value=raw)
        return None
    if amount is not None and amount < 0:
        errors.add(field, f"{label} cannot be negative", kind="amount", value=raw)
        return None
    return amount
