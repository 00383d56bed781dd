"""
Event Finance Manager - Budget Line Item Service

Create, update and delete budget line items for an event, with:
- Capability re-checks on every mutation (including per-field cost gating)
- Validation that reports every bad field at once and persists nothing
- Optional cap of total estimated cost at the event budget
- Over-budget alerts after each change
- Activity logging of every mutation
"""

import uuid
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinance.config import Settings, get_settings
from eventfinance.models.activity import NotificationType
from eventfinance.models.base import utcnow
from eventfinance.models.budget import BudgetItemCategory, BudgetItemStatus, BudgetLineItem
from eventfinance.models.event import Event
from eventfinance.models.expense import Expense, ExpenseStatus
from eventfinance.models.user import User
from eventfinance.services.activity_service import ActivityAction, ActivityService
from eventfinance.services.budget_calculations import (
    calculate_budget_totals,
    calculate_category_totals,
    calculate_variance_summary,
    get_budget_status,
)
from eventfinance.services.event_service import EventService
from eventfinance.services.notification_service import NotificationService
from eventfinance.services.validation import (
    FieldErrors,
    check_cost,
    clean_text,
    enum_values,
    parse_enum,
)
from eventfinance.utils.error_handling import (
    BudgetExceededException,
    BudgetItemNotFoundException,
    ConfirmationRequiredException,
)
from eventfinance.utils.money import normalize_amount
from eventfinance.utils.permissions import (
    BudgetCapability,
    BudgetPermissions,
    can_change_actual,
    can_change_estimated,
    require,
)

logger = logging.getLogger(__name__)

# Fields callers may set; id and event_id are never editable
EDITABLE_FIELDS = (
    "category",
    "subcategory",
    "description",
    "estimated_cost",
    "actual_cost",
    "status",
    "notes",
    "assigned_user_id",
    "vendor",
    "vendor_id",
    "strategic_goal_id",
    "file_attachment",
)


class BudgetItemService:
    """Service for budget line item lifecycle and budget roll-ups."""

    def __init__(self, db: AsyncSession, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or get_settings()
        self.events = EventService(db)
        self.activity = ActivityService(db)
        self.notifications = NotificationService(db, self.settings)

    # =========================================================================
    # QUERIES
    # =========================================================================

    async def list_items(self, event_id: uuid.UUID, organization_id: uuid.UUID) -> List[BudgetLineItem]:
        await self.events.get_event(event_id, organization_id)
        result = await self.db.execute(
            select(BudgetLineItem)
            .where(BudgetLineItem.event_id == event_id)
            .order_by(BudgetLineItem.created_at)
        )
        return list(result.scalars().all())

    async def get_item(
        self,
        event_id: uuid.UUID,
        item_id: uuid.UUID,
        organization_id: uuid.UUID,
    ) -> BudgetLineItem:
        await self.events.get_event(event_id, organization_id)
        return await self._get_item_for_event(event_id, item_id)

    async def _get_item_for_event(self, event_id: uuid.UUID, item_id: uuid.UUID) -> BudgetLineItem:
        result = await self.db.execute(
            select(BudgetLineItem)
            .where(BudgetLineItem.id == item_id)
            .where(BudgetLineItem.event_id == event_id)
        )
        item = result.scalar_one_or_none()
        if not item:
            raise BudgetItemNotFoundException(item_id)
        return item

    async def get_event_cost_totals(self, event_id: uuid.UUID) -> Tuple[Decimal, Decimal]:
        """(sum of estimated cost, sum of actual cost) for an event."""
        result = await self.db.execute(
            select(
                func.sum(BudgetLineItem.estimated_cost),
                func.sum(BudgetLineItem.actual_cost),
            ).where(BudgetLineItem.event_id == event_id)
        )
        estimated, actual = result.one()
        return normalize_amount(estimated), normalize_amount(actual)

    async def get_budget_summary(self, event_id: uuid.UUID, organization_id: uuid.UUID) -> Dict[str, Any]:
        """Totals, category breakdown, variance and status tier for an event."""
        event = await self.events.get_event(event_id, organization_id)
        items = await self.list_items(event_id, organization_id)

        totals = calculate_budget_totals(items)
        variance = calculate_variance_summary(items)
        return {
            "event_id": event.id,
            "event_budget": event.budget,
            "item_count": len(items),
            "totals": totals.to_dict(),
            "category_totals": {
                category: {"allocated": bucket.allocated, "spent": bucket.spent}
                for category, bucket in calculate_category_totals(items).items()
            },
            "variance": {
                "total_estimated": variance.total_estimated,
                "total_actual": variance.total_actual,
                "variance": variance.variance,
                "variance_percentage": variance.variance_percentage,
                "is_over_budget": variance.is_over_budget,
            },
            "status": get_budget_status(totals.percentage_spent).to_dict(),
        }

    # =========================================================================
    # VALIDATION AND GATING
    # =========================================================================

    def _validate(self, data: Dict[str, Any], partial: bool) -> Dict[str, Any]:
        errors = FieldErrors()
        cleaned: Dict[str, Any] = {}

        if "category" in data or not partial:
            raw = data.get("category")
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                errors.add("category", "Category is required")
            else:
                try:
                    cleaned["category"] = parse_enum(BudgetItemCategory, raw)
                except ValueError:
                    errors.add(
                        "category",
                        f"Category must be one of: {', '.join(enum_values(BudgetItemCategory))}",
                        kind="category",
                        value=raw,
                    )

        if "description" in data or not partial:
            description = clean_text(data.get("description"))
            if not description:
                errors.add("description", "Description is required")
            else:
                cleaned["description"] = description

        for field, label in (("estimated_cost", "Estimated cost"), ("actual_cost", "Actual cost")):
            if field in data:
                before = len(errors.errors)
                amount = check_cost(errors, data, field, label)
                if len(errors.errors) == before:
                    cleaned[field] = amount

        if data.get("status") is not None:
            try:
                cleaned["status"] = parse_enum(BudgetItemStatus, data["status"])
            except ValueError:
                errors.add(
                    "status",
                    f"Status must be one of: {', '.join(enum_values(BudgetItemStatus))}",
                )

        for field in ("subcategory", "notes", "vendor", "file_attachment"):
            if field in data:
                cleaned[field] = clean_text(data[field])

        for field in ("assigned_user_id", "vendor_id", "strategic_goal_id"):
            if field in data:
                cleaned[field] = data[field]

        errors.raise_if_any(
            "Budget item validation failed",
            allowed_categories=enum_values(BudgetItemCategory),
        )
        return cleaned

    @staticmethod
    def _check_cost_permissions(permissions: BudgetPermissions, changed: Dict[str, Any]) -> None:
        if "estimated_cost" in changed and not can_change_estimated(permissions):
            require(permissions, BudgetCapability.EDIT_ESTIMATED)
        if "actual_cost" in changed and not can_change_actual(permissions):
            require(permissions, BudgetCapability.EDIT_ACTUAL)

    async def _check_budget_cap(
        self,
        event: Event,
        new_estimate: Optional[Decimal],
        exclude_item_id: Optional[uuid.UUID] = None,
    ) -> None:
        """Reject a change that would push total estimated cost over the event budget."""
        if not self.settings.enforce_event_budget_cap or event.budget is None:
            return

        query = select(func.sum(BudgetLineItem.estimated_cost)).where(
            BudgetLineItem.event_id == event.id
        )
        if exclude_item_id is not None:
            query = query.where(BudgetLineItem.id != exclude_item_id)
        existing = normalize_amount(await self.db.scalar(query))

        new_total = existing + normalize_amount(new_estimate)
        budget = normalize_amount(event.budget)
        if new_total > budget:
            logger.warning(
                f"Budget cap hit on event {event.id}: total {new_total} over budget {budget}"
            )
            raise BudgetExceededException(event.name, budget, new_total)

    # =========================================================================
    # ALERTS
    # =========================================================================

    async def check_budget_alerts(self, event: Event, actor: Optional[User] = None) -> bool:
        """
        Notify the event creator and finance staff when actual spend exceeds
        the estimate. Returns True when an alert was raised.

        Runs inside the caller's transaction; pending changes must be flushed.
        """
        total_estimated, total_actual = await self.get_event_cost_totals(event.id)
        variance = total_actual - total_estimated
        if variance <= 0:
            return False

        variance_pct = (
            (variance / total_estimated * 100).quantize(Decimal("0.01"))
            if total_estimated > 0
            else Decimal("0.00")
        )
        recipients = [event.created_by_id]
        recipients.extend(await self.notifications.get_finance_recipients(event.organization_id))

        metadata = {
            "event_id": str(event.id),
            "total_estimated": str(total_estimated),
            "total_actual": str(total_actual),
            "variance": str(variance),
            "variance_percentage": str(variance_pct),
        }
        await self.notifications.notify_users(
            recipients,
            title=f"Budget Alert: {event.name}",
            message=(
                f"Event '{event.name}' is over budget by {variance:,.2f} "
                f"({variance_pct}% over estimate)."
            ),
            notification_type=NotificationType.WARNING,
            metadata=metadata,
        )
        await self.activity.log_action(
            ActivityAction.BUDGET_OVER_BUDGET_ALERT,
            user_id=actor.id if actor else None,
            event_id=event.id,
            details=metadata,
        )
        logger.warning(f"Event {event.id} over budget by {variance}")
        return True

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    async def create_item(
        self,
        event_id: uuid.UUID,
        data: Dict[str, Any],
        actor: User,
        permissions: BudgetPermissions,
    ) -> BudgetLineItem:
        """Create a budget line item in Pending unless a status is given."""
        require(permissions, BudgetCapability.EDIT_BUDGET)
        event = await self.events.get_event(event_id, actor.organization_id)
        cleaned = self._validate(data, partial=False)

        provided_costs = {k: v for k, v in cleaned.items() if k in ("estimated_cost", "actual_cost") and v is not None}
        self._check_cost_permissions(permissions, provided_costs)
        if cleaned.get("estimated_cost") is not None:
            await self._check_budget_cap(event, cleaned["estimated_cost"])

        item = BudgetLineItem(
            event_id=event.id,
            last_edited_by_id=actor.id,
            last_edited_at=utcnow(),
            **cleaned,
        )
        if item.status is None:
            item.status = BudgetItemStatus.PENDING
        self.db.add(item)
        await self.db.flush()

        await self.activity.log_action(
            ActivityAction.BUDGET_ITEM_CREATED,
            user_id=actor.id,
            event_id=event.id,
            details={"budget_item_id": str(item.id), "category": item.category.value},
        )
        await self.check_budget_alerts(event, actor)
        await self.db.commit()
        await self.db.refresh(item)

        logger.info(f"Budget item {item.id} created on event {event.id} by user {actor.id}")
        return item

    async def update_item(
        self,
        event_id: uuid.UUID,
        item_id: uuid.UUID,
        updates: Dict[str, Any],
        actor: User,
        permissions: BudgetPermissions,
    ) -> BudgetLineItem:
        """
        Apply only the fields that differ from the stored item.

        An update that changes nothing returns the item untouched, without
        bumping audit fields or writing activity.
        """
        require(permissions, BudgetCapability.EDIT_BUDGET)
        event = await self.events.get_event(event_id, actor.organization_id)
        item = await self._get_item_for_event(event.id, item_id)
        cleaned = self._validate(updates, partial=True)

        changed = {
            field: value
            for field, value in cleaned.items()
            if field in EDITABLE_FIELDS and getattr(item, field) != value
        }
        if not changed:
            return item

        self._check_cost_permissions(permissions, changed)
        if "estimated_cost" in changed:
            new_estimate = changed["estimated_cost"]
            if normalize_amount(new_estimate) > normalize_amount(item.estimated_cost):
                await self._check_budget_cap(event, new_estimate, exclude_item_id=item.id)

        for field, value in changed.items():
            setattr(item, field, value)
        item.last_edited_by_id = actor.id
        item.last_edited_at = utcnow()
        await self.db.flush()

        await self.activity.log_action(
            ActivityAction.BUDGET_ITEM_UPDATED,
            user_id=actor.id,
            event_id=event.id,
            details={"budget_item_id": str(item.id), "changed_fields": sorted(changed)},
        )
        await self.check_budget_alerts(event, actor)
        await self.db.commit()
        await self.db.refresh(item)

        logger.info(f"Budget item {item.id} updated by user {actor.id}: {sorted(changed)}")
        return item

    async def delete_item(
        self,
        event_id: uuid.UUID,
        item_id: uuid.UUID,
        actor: User,
        permissions: BudgetPermissions,
        confirmed: bool = False,
    ) -> None:
        """
        Two-phase hard delete.

        The first call (``confirmed=False``) raises ConfirmationRequiredException
        with a summary and changes nothing. Deleting an item that is already
        gone raises BudgetItemNotFoundException.
        """
        require(permissions, BudgetCapability.EDIT_BUDGET)
        event = await self.events.get_event(event_id, actor.organization_id)
        item = await self._get_item_for_event(event.id, item_id)

        if not confirmed:
            linked = await self.db.scalar(
                select(func.count(Expense.id)).where(Expense.budget_item_id == item.id)
            )
            raise ConfirmationRequiredException(
                "BudgetLineItem",
                item.id,
                {
                    "description": item.description,
                    "category": item.category.value,
                    "estimated_cost": str(normalize_amount(item.estimated_cost)),
                    "actual_cost": str(normalize_amount(item.actual_cost)),
                    "linked_expense_count": linked or 0,
                },
            )

        await self.db.execute(
            update(Expense)
            .where(Expense.budget_item_id == item.id)
            .values(budget_item_id=None)
        )
        await self.db.delete(item)
        await self.db.flush()

        await self.activity.log_action(
            ActivityAction.BUDGET_ITEM_DELETED,
            user_id=actor.id,
            event_id=event.id,
            details={"budget_item_id": str(item_id), "description": item.description},
        )
        await self.check_budget_alerts(event, actor)
        await self.db.commit()

        logger.info(f"Budget item {item_id} deleted by user {actor.id}")

    async def recalculate_actual_cost(self, item_id: uuid.UUID) -> Optional[BudgetLineItem]:
        """Set an item's actual cost to the sum of its approved expenses."""
        item = await self.db.get(BudgetLineItem, item_id)
        if item is None:
            return None
        total = await self.db.scalar(
            select(func.sum(Expense.amount))
            .where(Expense.budget_item_id == item_id)
            .where(Expense.status == ExpenseStatus.APPROVED)
        )
        item.actual_cost = normalize_amount(total)
        item.last_edited_at = utcnow()
        await self.db.flush()
        return item
