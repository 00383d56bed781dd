"""
Event Finance Manager - Money Helper Tests

Tests for amount normalization and variance display.
"""

from decimal import Decimal

import pytest

from eventfinance.utils.money import (
    ZERO,
    calculate_variance,
    format_variance,
    normalize_amount,
)


class _DecimalLike:
    """Stand-in for a persistence decimal type exposing to_decimal()."""

    def __init__(self, value: str):
        self._value = value

    def to_decimal(self) -> Decimal:
        return Decimal(self._value)


class _FloatLike:
    def __float__(self) -> float:
        return 7.25


class TestNormalizeAmount:
    """Tests for normalize_amount."""

    def test_absent_is_zero(self):
        assert normalize_amount(None) == ZERO

    def test_numeric_string(self):
        assert normalize_amount("12.50") == Decimal("12.5")

    def test_padded_numeric_string(self):
        assert normalize_amount("  300 ") == Decimal("300")

    def test_junk_string_is_zero(self):
        assert normalize_amount("abc") == ZERO

    def test_blank_string_is_zero(self):
        assert normalize_amount("   ") == ZERO

    def test_int_unchanged(self):
        assert normalize_amount(42) == Decimal("42")

    def test_decimal_unchanged(self):
        value = Decimal("1234.56")
        assert normalize_amount(value) is value

    def test_float_keeps_its_printed_value(self):
        assert normalize_amount(0.1) == Decimal("0.1")

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), Decimal("NaN"), "Infinity"])
    def test_non_finite_is_zero(self, value):
        assert normalize_amount(value) == ZERO

    def test_bool_is_zero(self):
        assert normalize_amount(True) == ZERO

    def test_to_decimal_object(self):
        assert normalize_amount(_DecimalLike("99.95")) == Decimal("99.95")

    def test_float_convertible_object(self):
        assert normalize_amount(_FloatLike()) == Decimal("7.25")

    @pytest.mark.parametrize("value", [[1, 2], {"amount": 5}, object()])
    def test_other_types_are_zero(self, value):
        assert normalize_amount(value) == ZERO


class TestVariance:
    """Tests for variance calculation and display."""

    def test_variance_is_estimated_minus_actual(self):
        assert calculate_variance(Decimal("500"), Decimal("650")) == Decimal("-150")

    def test_variance_normalizes_inputs(self):
        assert calculate_variance("100", None) == Decimal("100")

    def test_under_budget_label(self):
        display = format_variance(Decimal("25.00"))
        assert display.amount == Decimal("25.00")
        assert display.label == "under"

    def test_over_budget_label_uses_absolute_amount(self):
        display = format_variance(Decimal("-40"))
        assert display.amount == Decimal("40")
        assert display.label == "over"

    def test_zero_variance_is_under(self):
        assert format_variance(0).label == "under"
