"""
Event Finance Manager - Event Service

Event CRUD and the organization dashboard. Every lookup is scoped to the
caller's organization; an event from another organization is reported as
not found.
"""

import uuid
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinance.models.budget import BudgetLineItem
from eventfinance.models.event import Event, EventStatus
from eventfinance.models.expense import Expense, ExpenseStatus
from eventfinance.models.user import User
from eventfinance.services.activity_service import ActivityAction, ActivityService
from eventfinance.services.budget_calculations import (
    calculate_event_progress,
    calculate_portfolio_totals,
)
from eventfinance.services.validation import (
    FieldErrors,
    clean_text,
    enum_values,
    parse_decimal,
    parse_enum,
)
from eventfinance.utils.error_handling import (
    ConfirmationRequiredException,
    EventNotFoundException,
)
from eventfinance.utils.money import ZERO, normalize_amount
from eventfinance.utils.permissions import BudgetCapability, BudgetPermissions, require

logger = logging.getLogger(__name__)

EVENT_FIELDS = ("name", "description", "venue", "start_date", "end_date", "budget", "status")


class EventService:
    """Service for events and the dashboard roll-up."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.activity = ActivityService(db)

    # =========================================================================
    # QUERIES
    # =========================================================================

    async def get_event(self, event_id: uuid.UUID, organization_id: uuid.UUID) -> Event:
        """Load an event within an organization or raise EventNotFoundException."""
        result = await self.db.execute(
            select(Event)
            .where(Event.id == event_id)
            .where(Event.organization_id == organization_id)
        )
        event = result.scalar_one_or_none()
        if not event:
            raise EventNotFoundException(event_id)
        return event

    async def list_events(
        self,
        organization_id: uuid.UUID,
        status: Optional[EventStatus] = None,
    ) -> List[Event]:
        query = select(Event).where(Event.organization_id == organization_id)
        if status:
            query = query.where(Event.status == status)
        query = query.order_by(Event.start_date.desc().nulls_last(), Event.created_at.desc())

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_spent_by_event(self, organization_id: uuid.UUID) -> Dict[uuid.UUID, Decimal]:
        """Sum of budget item actual cost per event."""
        result = await self.db.execute(
            select(BudgetLineItem.event_id, func.sum(BudgetLineItem.actual_cost))
            .join(Event, Event.id == BudgetLineItem.event_id)
            .where(Event.organization_id == organization_id)
            .group_by(BudgetLineItem.event_id)
        )
        return {event_id: normalize_amount(total) for event_id, total in result.all()}

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def _validate(self, data: Dict[str, Any], partial: bool, current: Optional[Event] = None) -> Dict[str, Any]:
        errors = FieldErrors()
        cleaned: Dict[str, Any] = {}

        if "name" in data or not partial:
            name = clean_text(data.get("name"))
            if not name:
                errors.add("name", "Event name is required")
            else:
                cleaned["name"] = name

        for field in ("description", "venue"):
            if field in data:
                cleaned[field] = clean_text(data[field])

        for field in ("start_date", "end_date"):
            if field in data:
                cleaned[field] = data[field]

        if "budget" in data:
            raw = data["budget"]
            try:
                budget = parse_decimal(raw)
            except ValueError as exc:
                errors.add("budget", f"Budget {exc}", kind="amount", value=raw)
            else:
                if budget is not None and budget < 0:
                    errors.add("budget", "Budget cannot be negative", kind="amount", value=raw)
                else:
                    cleaned["budget"] = budget

        if data.get("status") is not None:
            try:
                cleaned["status"] = parse_enum(EventStatus, data["status"])
            except ValueError:
                errors.add(
                    "status",
                    f"Status must be one of: {', '.join(enum_values(EventStatus))}",
                )

        start = cleaned.get("start_date", current.start_date if current else None)
        end = cleaned.get("end_date", current.end_date if current else None)
        if start and end and end < start:
            errors.add("end_date", "End date cannot be before start date")

        errors.raise_if_any("Event validation failed")
        return cleaned

    async def create_event(
        self,
        organization_id: uuid.UUID,
        data: Dict[str, Any],
        actor: User,
        permissions: BudgetPermissions,
    ) -> Event:
        """Create an event in Planning unless a status is given."""
        require(permissions, BudgetCapability.MANAGE_EVENTS)
        cleaned = self._validate(data, partial=False)

        event = Event(
            organization_id=organization_id,
            created_by_id=actor.id,
            **cleaned,
        )
        if event.status is None:
            event.status = EventStatus.PLANNING
        self.db.add(event)
        await self.db.flush()

        await self.activity.log_action(
            ActivityAction.EVENT_CREATED,
            user_id=actor.id,
            event_id=event.id,
            details={"name": event.name},
        )
        await self.db.commit()
        await self.db.refresh(event)

        logger.info(f"Event {event.id} created by user {actor.id}")
        return event

    async def update_event(
        self,
        event_id: uuid.UUID,
        organization_id: uuid.UUID,
        updates: Dict[str, Any],
        actor: User,
        permissions: BudgetPermissions,
    ) -> Event:
        """Apply changed fields only, including an explicit status change."""
        require(permissions, BudgetCapability.MANAGE_EVENTS)
        event = await self.get_event(event_id, organization_id)
        cleaned = self._validate(updates, partial=True, current=event)

        changed = {
            field: value
            for field, value in cleaned.items()
            if field in EVENT_FIELDS and getattr(event, field) != value
        }
        if not changed:
            return event

        for field, value in changed.items():
            setattr(event, field, value)

        await self.activity.log_action(
            ActivityAction.EVENT_UPDATED,
            user_id=actor.id,
            event_id=event.id,
            details={"changed_fields": sorted(changed)},
        )
        await self.db.commit()
        await self.db.refresh(event)

        logger.info(f"Event {event.id} updated by user {actor.id}: {sorted(changed)}")
        return event

    async def get_delete_summary(self, event: Event) -> Dict[str, Any]:
        item_count = await self.db.scalar(
            select(func.count(BudgetLineItem.id)).where(BudgetLineItem.event_id == event.id)
        )
        expense_count = await self.db.scalar(
            select(func.count(Expense.id)).where(Expense.event_id == event.id)
        )
        return {
            "name": event.name,
            "status": event.status.value,
            "budget_item_count": item_count or 0,
            "expense_count": expense_count or 0,
        }

    async def delete_event(
        self,
        event_id: uuid.UUID,
        organization_id: uuid.UUID,
        actor: User,
        permissions: BudgetPermissions,
        confirmed: bool = False,
    ) -> None:
        """
        Two-phase delete.

        Without ``confirmed`` nothing is removed and ConfirmationRequiredException
        carries a summary of what the delete would take with it.
        """
        require(permissions, BudgetCapability.DELETE_EVENTS)
        event = await self.get_event(event_id, organization_id)

        if not confirmed:
            summary = await self.get_delete_summary(event)
            raise ConfirmationRequiredException("Event", event.id, summary)

        await self.activity.log_action(
            ActivityAction.EVENT_DELETED,
            user_id=actor.id,
            details={"event_id": str(event.id), "name": event.name},
        )
        await self.db.delete(event)
        await self.db.commit()

        logger.info(f"Event {event_id} deleted by user {actor.id}")

    # =========================================================================
    # DASHBOARD
    # =========================================================================

    async def get_dashboard(self, organization_id: uuid.UUID) -> Dict[str, Any]:
        """
        Organization overview.

        Per-event progress is capped and rounded; the overall utilisation is
        not, so an overspent portfolio still reads above 100%.
        """
        events = await self.list_events(organization_id)
        spent_by_event = await self.get_spent_by_event(organization_id)

        rows = []
        status_counts = {status.value: 0 for status in EventStatus}
        for event in events:
            budget = normalize_amount(event.budget)
            spent = spent_by_event.get(event.id, ZERO)
            status_counts[event.status.value] += 1
            rows.append({
                "id": event.id,
                "name": event.name,
                "status": event.status,
                "budget": budget,
                "spent": spent,
                "remaining": budget - spent,
                "progress": calculate_event_progress(budget, spent),
            })

        pending = await self.db.execute(
            select(func.count(Expense.id), func.sum(Expense.amount))
            .where(Expense.organization_id == organization_id)
            .where(Expense.status == ExpenseStatus.PENDING)
        )
        pending_count, pending_amount = pending.one()

        totals = calculate_portfolio_totals(rows)
        return {
            "events": rows,
            "totals": {
                "total_budget": totals.total_budget,
                "total_spent": totals.total_spent,
                "total_remaining": totals.total_remaining,
                "utilization_percentage": totals.utilization_percentage,
                "status": totals.status.to_dict(),
            },
            "status_counts": status_counts,
            "pending_expense_count": pending_count or 0,
            "pending_expense_amount": normalize_amount(pending_amount),
        }
