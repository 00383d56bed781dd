"""
Event Finance Manager - SQLAlchemy Models Package

This package contains all database models for the application.
"""

from eventfinance.models.base import BaseModel, TimestampMixin, AuditMixin
from eventfinance.models.user import User, UserRole, Organization
from eventfinance.models.event import Event, EventStatus, StrategicGoal
from eventfinance.models.vendor import Vendor
from eventfinance.models.budget import BudgetLineItem, BudgetItemCategory, BudgetItemStatus
from eventfinance.models.expense import (
    Expense,
    ExpenseStatus,
    ExpenseWorkflowEntry,
    WorkflowAction,
)
from eventfinance.models.activity import ActivityLog, Notification, NotificationType

__all__ = [
    "BaseModel",
    "TimestampMixin",
    "AuditMixin",
    "User",
    "UserRole",
    "Organization",
    "Event",
    "EventStatus",
    "StrategicGoal",
    "Vendor",
    "BudgetLineItem",
    "BudgetItemCategory",
    "BudgetItemStatus",
    "Expense",
    "ExpenseStatus",
    "ExpenseWorkflowEntry",
    "WorkflowAction",
    "ActivityLog",
    "Notification",
    "NotificationType",
]
