"""
Event Finance Manager - Routers Package

FastAPI route handlers.

Routers:
- events: Event management and activity feed
- budget_items: Budget line items and event budget summary
- expenses: Expense submission and approval
- dashboard: Organization dashboard
- me: Current user's permissions and notifications
"""

from eventfinance.routers import (
    events,
    budget_items,
    expenses,
    dashboard,
    me,
)

__all__ = [
    "events",
    "budget_items",
    "expenses",
    "dashboard",
    "me",
]
