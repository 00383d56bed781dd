"""
Event Finance Manager - Services Package

Business logic services.
"""

from eventfinance.services.activity_service import ActivityAction, ActivityService
from eventfinance.services.notification_service import NotificationService
from eventfinance.services.event_service import EventService
from eventfinance.services.budget_item_service import BudgetItemService
from eventfinance.services.expense_service import ExpenseService

__all__ = [
    "ActivityAction",
    "ActivityService",
    "NotificationService",
    "EventService",
    "BudgetItemService",
    "ExpenseService",
]
