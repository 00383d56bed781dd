"""
Event Finance Manager - Budget Calculations

Pure aggregation over budget line items, expenses and events. Nothing here
touches the database; inputs may be ORM objects or plain dicts using either
snake_case or camelCase keys.

Two percentage functions exist on purpose and must stay separate:

- ``BudgetTotals.percentage_spent`` is uncapped and unrounded. It feeds
  summary figures and status tiers, so 150% must stay 150%.
- ``calculate_event_progress`` is capped at 100 and rounded to an int. It
  feeds single-event progress bars.
"""

from dataclasses import asdict, dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from eventfinance.utils.money import ZERO, normalize_amount

HUNDRED = Decimal("100")

# Utilisation thresholds; each tier's lower bound is exclusive
OVER_BUDGET_THRESHOLD = 90
AT_RISK_THRESHOLD = 75

APPROVED = "Approved"
PENDING = "Pending"
REJECTED = "Rejected"


# ===========================================
# RESULT TYPES
# ===========================================

@dataclass(frozen=True)
class BudgetTotals:
    total_allocated: Decimal
    total_spent: Decimal
    remaining: Decimal
    percentage_spent: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CategoryTotals:
    allocated: Decimal = ZERO
    spent: Decimal = ZERO


@dataclass(frozen=True)
class BudgetStatusTier:
    """Utilisation tier with the display classes the UI renders it with."""
    label: str
    bg: str
    border: str
    text: str
    indicator: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class ExpenseTotals:
    total_allocated: Decimal
    total_spent: Decimal
    remaining: Decimal
    percentage_spent: Decimal
    pending_amount: Decimal
    pending_count: int
    approved_count: int
    rejected_count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class VarianceSummary:
    total_estimated: Decimal
    total_actual: Decimal
    variance: Decimal
    variance_percentage: Decimal
    is_over_budget: bool


@dataclass(frozen=True)
class PortfolioTotals:
    total_budget: Decimal
    total_spent: Decimal
    total_remaining: Decimal
    utilization_percentage: Decimal
    status: BudgetStatusTier


OVER_BUDGET = BudgetStatusTier(
    label="Over Budget",
    bg="bg-red-50",
    border="border-red-200",
    text="text-red-700",
    indicator="bg-red-500",
)
AT_RISK = BudgetStatusTier(
    label="At Risk",
    bg="bg-amber-50",
    border="border-amber-200",
    text="text-amber-700",
    indicator="bg-amber-500",
)
ON_TRACK = BudgetStatusTier(
    label="On Track",
    bg="bg-emerald-50",
    border="border-emerald-200",
    text="text-emerald-700",
    indicator="bg-emerald-500",
)


# ===========================================
# FIELD ACCESS
# ===========================================

def _get(item: Any, *names: str) -> Any:
    """First present attribute/key among names, else None."""
    for name in names:
        if isinstance(item, dict):
            if name in item:
                return item[name]
        elif hasattr(item, name):
            return getattr(item, name)
    return None


def _estimated(item: Any) -> Decimal:
    return normalize_amount(_get(item, "estimated_cost", "estimatedCost"))


def _actual(item: Any) -> Decimal:
    return normalize_amount(_get(item, "actual_cost", "actualCost"))


def _label(value: Any) -> Optional[str]:
    """Enum members collapse to their stored value."""
    if value is None:
        return None
    return getattr(value, "value", value)


def _percentage(part: Decimal, whole: Decimal) -> Decimal:
    if whole <= 0:
        return ZERO
    return part / whole * HUNDRED


# ===========================================
# BUDGET LINE ITEMS
# ===========================================

def calculate_budget_totals(items: Iterable[Any]) -> BudgetTotals:
    """Sum estimated and actual cost; percentage is not capped."""
    total_allocated = ZERO
    total_spent = ZERO
    for item in items:
        total_allocated += _estimated(item)
        total_spent += _actual(item)

    return BudgetTotals(
        total_allocated=total_allocated,
        total_spent=total_spent,
        remaining=total_allocated - total_spent,
        percentage_spent=_percentage(total_spent, total_allocated),
    )


def calculate_category_totals(items: Iterable[Any]) -> Dict[str, CategoryTotals]:
    """Allocated/spent per category, in first-seen order."""
    totals: Dict[str, CategoryTotals] = {}
    for item in items:
        category = _label(_get(item, "category"))
        if category is None:
            continue
        bucket = totals.setdefault(category, CategoryTotals())
        bucket.allocated += _estimated(item)
        bucket.spent += _actual(item)
    return totals


def get_budget_status(percentage: Any) -> BudgetStatusTier:
    """
    Classify a utilisation percentage.

    > 90 is Over Budget, > 75 is At Risk, anything else On Track. Exactly 90
    is At Risk and exactly 75 is On Track.
    """
    value = normalize_amount(percentage)
    if value > OVER_BUDGET_THRESHOLD:
        return OVER_BUDGET
    if value > AT_RISK_THRESHOLD:
        return AT_RISK
    return ON_TRACK


def calculate_event_progress(budget: Any, spent: Any) -> int:
    """Single-event progress: capped at 100 and rounded half up."""
    budget_amount = normalize_amount(budget)
    if budget_amount <= 0:
        return 0
    percentage = normalize_amount(spent) / budget_amount * HUNDRED
    percentage = max(ZERO, min(HUNDRED, percentage))
    return int(percentage.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_variance_summary(items: Iterable[Any]) -> VarianceSummary:
    """
    Event-level variance, signed as actual minus estimated.

    Note the sign is the opposite of a single line item's ``variance``:
    here a positive figure means overspend.
    """
    totals = calculate_budget_totals(items)
    variance = totals.total_spent - totals.total_allocated
    if totals.total_allocated > 0:
        variance_percentage = (variance / totals.total_allocated * HUNDRED).quantize(
            Decimal("0.01"), rounding=ROUND_HALF_UP
        )
    else:
        variance_percentage = Decimal("0.00")
    return VarianceSummary(
        total_estimated=totals.total_allocated,
        total_actual=totals.total_spent,
        variance=variance,
        variance_percentage=variance_percentage,
        is_over_budget=variance > 0,
    )


# ===========================================
# EXPENSES
# ===========================================

def calculate_expense_totals(expenses: Iterable[Any]) -> ExpenseTotals:
    """
    Expense roll-up: allocated is every amount, spent is approved amounts.
    """
    total_allocated = ZERO
    total_spent = ZERO
    pending_amount = ZERO
    counts = {APPROVED: 0, PENDING: 0, REJECTED: 0}

    for expense in expenses:
        amount = normalize_amount(_get(expense, "amount"))
        status = _label(_get(expense, "status"))
        total_allocated += amount
        if status == APPROVED:
            total_spent += amount
        elif status == PENDING:
            pending_amount += amount
        if status in counts:
            counts[status] += 1

    return ExpenseTotals(
        total_allocated=total_allocated,
        total_spent=total_spent,
        remaining=total_allocated - total_spent,
        percentage_spent=_percentage(total_spent, total_allocated),
        pending_amount=pending_amount,
        pending_count=counts[PENDING],
        approved_count=counts[APPROVED],
        rejected_count=counts[REJECTED],
    )


# ===========================================
# EVENTS (DASHBOARD)
# ===========================================

def calculate_portfolio_totals(events: Iterable[Any]) -> PortfolioTotals:
    """Budget vs spent across events; utilisation is uncapped."""
    total_budget = ZERO
    total_spent = ZERO
    for event in events:
        total_budget += normalize_amount(_get(event, "budget"))
        total_spent += normalize_amount(_get(event, "spent"))

    utilization = _percentage(total_spent, total_budget)
    return PortfolioTotals(
        total_budget=total_budget,
        total_spent=total_spent,
        total_remaining=total_budget - total_spent,
        utilization_percentage=utilization,
        status=get_budget_status(utilization),
    )


def summarize_categories(items: Iterable[Any]) -> List[Dict[str, Any]]:
    """Category totals flattened for JSON responses."""
    return [
        {"category": category, "allocated": totals.allocated, "spent": totals.spent}
        for category, totals in calculate_category_totals(items).items()
    ]
