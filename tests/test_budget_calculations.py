"""
Event Finance Manager - Budget Calculation Tests

Pure aggregation tests:
- Budget totals (uncapped percentage)
- Category grouping
- Status tiers and their boundaries
- Single-event progress (capped and rounded)
- Variance and expense roll-ups
"""

from decimal import Decimal

import pytest

from eventfinance.models.budget import BudgetItemCategory, BudgetLineItem
from eventfinance.services.budget_calculations import (
    AT_RISK,
    ON_TRACK,
    OVER_BUDGET,
    calculate_budget_totals,
    calculate_category_totals,
    calculate_event_progress,
    calculate_expense_totals,
    calculate_portfolio_totals,
    calculate_variance_summary,
    get_budget_status,
    summarize_categories,
)


# =============================================================================
# BUDGET TOTALS
# =============================================================================

class TestBudgetTotals:
    """Tests for calculate_budget_totals."""

    def test_empty_input(self):
        totals = calculate_budget_totals([])

        assert totals.total_allocated == Decimal("0")
        assert totals.total_spent == Decimal("0")
        assert totals.remaining == Decimal("0")
        assert totals.percentage_spent == Decimal("0")

    def test_items_without_costs_are_all_zero(self):
        totals = calculate_budget_totals([{"category": "Venue"}, {}, {"estimated_cost": None}])

        assert totals.total_allocated == 0
        assert totals.total_spent == 0
        assert totals.percentage_spent == 0

    def test_remaining_is_exact(self):
        items = [
            {"estimated_cost": Decimal("1000.10"), "actual_cost": Decimal("400.05")},
            {"estimated_cost": Decimal("250.00"), "actual_cost": Decimal("300.00")},
        ]
        totals = calculate_budget_totals(items)

        assert totals.total_allocated == Decimal("1250.10")
        assert totals.total_spent == Decimal("700.05")
        assert totals.remaining == totals.total_allocated - totals.total_spent
        assert totals.remaining == Decimal("550.05")

    def test_percentage_is_not_capped(self):
        totals = calculate_budget_totals([{"estimated_cost": 100, "actual_cost": 150}])

        assert totals.percentage_spent == Decimal("150")
        assert totals.remaining == Decimal("-50")

    def test_mixed_input_shapes(self):
        items = [
            {"estimatedCost": "200", "actualCost": "50"},
            {"estimated_cost": 300.0, "actual_cost": None},
            BudgetLineItem(
                category=BudgetItemCategory.VENUE,
                description="Hall",
                estimated_cost=Decimal("500"),
                actual_cost=Decimal("450"),
            ),
        ]
        totals = calculate_budget_totals(items)

        assert totals.total_allocated == Decimal("1000")
        assert totals.total_spent == Decimal("500")
        assert totals.percentage_spent == Decimal("50")

    def test_junk_costs_count_as_zero(self):
        totals = calculate_budget_totals([{"estimated_cost": "n/a", "actual_cost": "abc"}])

        assert totals.total_allocated == 0
        assert totals.percentage_spent == 0


# =============================================================================
# CATEGORY TOTALS
# =============================================================================

class TestCategoryTotals:
    """Tests for calculate_category_totals."""

    def test_grouping(self):
        items = [
            {"category": "Venue", "estimated_cost": 100, "actual_cost": 80},
            {"category": "Venue", "estimated_cost": 50, "actual_cost": 60},
            {"category": "Catering", "estimated_cost": 200, "actual_cost": 150},
        ]
        totals = calculate_category_totals(items)

        assert list(totals) == ["Venue", "Catering"]
        assert totals["Venue"].allocated == Decimal("150")
        assert totals["Venue"].spent == Decimal("140")
        assert totals["Catering"].allocated == Decimal("200")
        assert totals["Catering"].spent == Decimal("150")

    def test_first_seen_order(self):
        items = [
            {"category": "Marketing", "estimated_cost": 1},
            {"category": "Catering", "estimated_cost": 1},
            {"category": "Marketing", "estimated_cost": 1},
        ]
        assert list(calculate_category_totals(items)) == ["Marketing", "Catering"]

    def test_enum_categories_collapse_to_values(self):
        items = [
            {"category": BudgetItemCategory.STAFF_TRAVEL, "estimated_cost": 10},
            {"category": "StaffTravel", "estimated_cost": 5},
        ]
        totals = calculate_category_totals(items)

        assert list(totals) == ["StaffTravel"]
        assert totals["StaffTravel"].allocated == Decimal("15")

    def test_empty_input_gives_empty_mapping(self):
        assert calculate_category_totals([]) == {}

    def test_items_without_category_are_skipped(self):
        totals = calculate_category_totals([{"estimated_cost": 100}])
        assert totals == {}

    def test_summarize_categories(self):
        rows = summarize_categories([{"category": "Venue", "estimated_cost": 10, "actual_cost": 4}])
        assert rows == [{"category": "Venue", "allocated": Decimal("10"), "spent": Decimal("4")}]


# =============================================================================
# STATUS TIERS
# =============================================================================

class TestBudgetStatus:
    """Tests for get_budget_status boundaries."""

    @pytest.mark.parametrize(
        "percentage, expected",
        [
            (0, ON_TRACK),
            (75, ON_TRACK),
            (Decimal("75.01"), AT_RISK),
            (90, AT_RISK),
            (Decimal("90.01"), OVER_BUDGET),
            (150, OVER_BUDGET),
        ],
    )
    def test_tiers(self, percentage, expected):
        assert get_budget_status(percentage) == expected

    def test_tier_labels(self):
        assert get_budget_status(90).label == "At Risk"
        assert get_budget_status(91).label == "Over Budget"
        assert get_budget_status(10).label == "On Track"

    def test_tier_carries_display_classes(self):
        tier = get_budget_status(95).to_dict()
        assert set(tier) == {"label", "bg", "border", "text", "indicator"}


# =============================================================================
# EVENT PROGRESS
# =============================================================================

class TestEventProgress:
    """Tests for calculate_event_progress."""

    @pytest.mark.parametrize("budget", [0, -100, None, "abc"])
    def test_zero_when_no_budget(self, budget):
        assert calculate_event_progress(budget, 500) == 0

    def test_capped_at_100(self):
        assert calculate_event_progress(100, 150) == 100

    def test_rounded_to_integer(self):
        assert calculate_event_progress(3, 1) == 33
        assert calculate_event_progress(3, 2) == 67

    def test_half_rounds_up(self):
        assert calculate_event_progress(200, 1) == 1

    @pytest.mark.parametrize("spent", [0, 1, 49, 100, 101, 10_000])
    def test_always_in_range(self, spent):
        progress = calculate_event_progress(100, spent)
        assert isinstance(progress, int)
        assert 0 <= progress <= 100

    def test_differs_from_uncapped_percentage(self):
        totals = calculate_budget_totals([{"estimated_cost": 100, "actual_cost": 150}])
        assert totals.percentage_spent == 150
        assert calculate_event_progress(100, 150) == 100


# =============================================================================
# VARIANCE, EXPENSES, PORTFOLIO
# =============================================================================

class TestVarianceSummary:
    """Tests for calculate_variance_summary."""

    def test_overspend_is_positive(self):
        summary = calculate_variance_summary([{"estimated_cost": 1000, "actual_cost": 1250}])

        assert summary.variance == Decimal("250")
        assert summary.variance_percentage == Decimal("25.00")
        assert summary.is_over_budget is True

    def test_underspend(self):
        summary = calculate_variance_summary([{"estimated_cost": 300, "actual_cost": 100}])

        assert summary.variance == Decimal("-200")
        assert summary.variance_percentage == Decimal("-66.67")
        assert summary.is_over_budget is False

    def test_no_estimate(self):
        summary = calculate_variance_summary([{"actual_cost": 50}])

        assert summary.variance_percentage == Decimal("0.00")
        assert summary.is_over_budget is True


class TestExpenseTotals:
    """Tests for calculate_expense_totals."""

    def test_rollup(self):
        expenses = [
            {"amount": Decimal("100"), "status": "Approved"},
            {"amount": Decimal("40"), "status": "Pending"},
            {"amount": Decimal("60"), "status": "Pending"},
            {"amount": Decimal("500"), "status": "Rejected"},
        ]
        totals = calculate_expense_totals(expenses)

        assert totals.total_allocated == Decimal("700")
        assert totals.total_spent == Decimal("100")
        assert totals.remaining == Decimal("600")
        assert totals.pending_amount == Decimal("100")
        assert totals.pending_count == 2
        assert totals.approved_count == 1
        assert totals.rejected_count == 1

    def test_empty(self):
        totals = calculate_expense_totals([])

        assert totals.total_allocated == 0
        assert totals.percentage_spent == 0
        assert totals.pending_count == 0


class TestPortfolioTotals:
    """Tests for calculate_portfolio_totals."""

    def test_utilization_is_uncapped(self):
        totals = calculate_portfolio_totals([
            {"budget": Decimal("1000"), "spent": Decimal("1500")},
            {"budget": None, "spent": Decimal("0")},
        ])

        assert totals.total_budget == Decimal("1000")
        assert totals.total_remaining == Decimal("-500")
        assert totals.utilization_percentage == Decimal("150")
        assert totals.status == OVER_BUDGET

    def test_on_track(self):
        totals = calculate_portfolio_totals([{"budget": 1000, "spent": 200}])
        assert totals.status == ON_TRACK
