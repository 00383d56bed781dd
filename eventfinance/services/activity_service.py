"""
Event Finance Manager - Activity Log Service

Records who did what to budgets and expenses. Entries are flushed into the
caller's transaction so they commit, or roll back, with the change itself.
"""

import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinance.models.activity import ActivityLog


class ActivityAction:
    """Action names written to the activity log."""
    BUDGET_ITEM_CREATED = "budget-item.created"
    BUDGET_ITEM_UPDATED = "budget-item.updated"
    BUDGET_ITEM_DELETED = "budget-item.deleted"
    BUDGET_OVER_BUDGET_ALERT = "budget.over-budget.alert"
    EXPENSE_CREATED = "expense.created"
    EXPENSE_UPDATED = "expense.updated"
    EXPENSE_DELETED = "expense.deleted"
    EXPENSE_APPROVED = "expense.approved"
    EXPENSE_REJECTED = "expense.rejected"
    EVENT_CREATED = "event.created"
    EVENT_UPDATED = "event.updated"
    EVENT_DELETED = "event.deleted"


class ActivityService:
    """Service for writing and reading the activity log."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def log_action(
        self,
        action: str,
        user_id: Optional[uuid.UUID] = None,
        event_id: Optional[uuid.UUID] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> ActivityLog:
        """
        Log an action.

        Args:
            action: Dotted action name, see ActivityAction
            user_id: Acting user
            event_id: Event the action relates to
            details: JSON-serialisable context (ids, changed field names)
        """
        entry = ActivityLog(
            action=action,
            user_id=user_id,
            event_id=event_id,
            details=details,
        )
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def get_event_activity(
        self,
        event_id: uuid.UUID,
        action: Optional[str] = None,
        limit: int = 100,
    ) -> List[ActivityLog]:
        """Most recent entries first."""
        query = select(ActivityLog).where(ActivityLog.event_id == event_id)
        if action:
            query = query.where(ActivityLog.action == action)
        query = query.order_by(ActivityLog.created_at.desc()).limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())
