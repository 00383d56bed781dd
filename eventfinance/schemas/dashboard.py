"""
Event Finance Manager - Dashboard and Permission Schemas
"""

from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel

from eventfinance.models.event import EventStatus
from eventfinance.schemas.budget import BudgetStatusResponse


class DashboardEvent(BaseModel):
    id: UUID
    name: str
    status: EventStatus
    budget: Decimal
    spent: Decimal
    remaining: Decimal
    progress: int


class DashboardTotals(BaseModel):
    total_budget: Decimal
    total_spent: Decimal
    total_remaining: Decimal
    utilization_percentage: Decimal
    status: BudgetStatusResponse


class DashboardResponse(BaseModel):
    events: List[DashboardEvent]
    totals: DashboardTotals
    status_counts: Dict[str, int]
    pending_expense_count: int
    pending_expense_amount: Decimal


class PermissionsResponse(BaseModel):
    """Capabilities resolved for the current request."""
    role: Optional[str] = None
    is_demo_mode: bool
    can_edit_budget: bool
    can_edit_estimated: bool
    can_edit_actual: bool
    can_edit_all: bool
    can_approve: bool
    is_viewer: bool
    can_create_expense: bool
    can_manage_events: bool
    can_delete_events: bool


class NotificationResponse(BaseModel):
    id: UUID
    type: str
    title: str
    message: str
    metadata: Optional[dict] = None
    is_read: bool
