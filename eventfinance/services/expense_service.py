"""
Event Finance Manager - Expense Service

Expense submission and the single-step approval workflow.

Pending -> Approved | Rejected. Both decisions are terminal; a second
decision on the same expense raises ExpenseAlreadyDecidedException and
writes nothing. Each decision appends one ExpenseWorkflowEntry.
"""

import uuid
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinance.config import Settings, get_settings
from eventfinance.models.activity import NotificationType
from eventfinance.models.base import utcnow
from eventfinance.models.budget import BudgetItemCategory, BudgetLineItem
from eventfinance.models.event import Event
from eventfinance.models.expense import (
    Expense,
    ExpenseStatus,
    ExpenseWorkflowEntry,
    WorkflowAction,
)
from eventfinance.models.user import User, UserRole
from eventfinance.services.activity_service import ActivityAction, ActivityService
from eventfinance.services.budget_calculations import ExpenseTotals, calculate_expense_totals
from eventfinance.services.budget_item_service import BudgetItemService
from eventfinance.services.event_service import EventService
from eventfinance.services.notification_service import NotificationService
from eventfinance.services.validation import (
    FieldErrors,
    clean_text,
    enum_values,
    parse_decimal,
    parse_enum,
)
from eventfinance.utils.error_handling import (
    AuthorizationException,
    CannotModifyException,
    ConfirmationRequiredException,
    ExpenseAlreadyDecidedException,
    ExpenseNotFoundException,
)
from eventfinance.utils.permissions import BudgetCapability, BudgetPermissions, require

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "title",
    "amount",
    "category",
    "description",
    "vendor",
    "vendor_id",
    "budget_item_id",
)


class ExpenseService:
    """Service for expenses and their approval workflow."""

    def __init__(self, db: AsyncSession, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or get_settings()
        self.events = EventService(db)
        self.budget_items = BudgetItemService(db, self.settings)
        self.activity = ActivityService(db)
        self.notifications = NotificationService(db, self.settings)

    # =========================================================================
    # QUERIES
    # =========================================================================

    async def get_expense(self, expense_id: uuid.UUID, organization_id: uuid.UUID) -> Expense:
        """Load an expense with its workflow history, scoped to an organization."""
        result = await self.db.execute(
            select(Expense)
            .where(Expense.id == expense_id)
            .where(Expense.organization_id == organization_id)
            .execution_options(populate_existing=True)
        )
        expense = result.scalar_one_or_none()
        if not expense:
            raise ExpenseNotFoundException(expense_id)
        return expense

    async def list_expenses(
        self,
        organization_id: uuid.UUID,
        event_id: Optional[uuid.UUID] = None,
        status: Optional[ExpenseStatus] = None,
        category: Optional[BudgetItemCategory] = None,
    ) -> List[Expense]:
        query = select(Expense).where(Expense.organization_id == organization_id)
        if event_id:
            query = query.where(Expense.event_id == event_id)
        if status:
            query = query.where(Expense.status == status)
        if category:
            query = query.where(Expense.category == category)
        query = query.order_by(Expense.created_at.desc())

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_expense_summary(
        self,
        organization_id: uuid.UUID,
        event_id: Optional[uuid.UUID] = None,
    ) -> ExpenseTotals:
        if event_id:
            await self.events.get_event(event_id, organization_id)
        expenses = await self.list_expenses(organization_id, event_id=event_id)
        return calculate_expense_totals(expenses)

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def _validate(self, data: Dict[str, Any], partial: bool) -> Dict[str, Any]:
        errors = FieldErrors()
        cleaned: Dict[str, Any] = {}

        if not partial:
            if data.get("event_id") is None:
                errors.add("event_id", "Event is required")
            else:
                cleaned["event_id"] = data["event_id"]

        if "title" in data or not partial:
            title = clean_text(data.get("title"))
            if not title:
                errors.add("title", "Title is required")
            else:
                cleaned["title"] = title

        if "amount" in data or not partial:
            raw = data.get("amount")
            try:
                amount = parse_decimal(raw)
            except ValueError as exc:
                errors.add("amount", f"Amount {exc}", kind="amount", value=raw)
            else:
                if amount is None:
                    errors.add("amount", "Amount is required", kind="amount", value=raw)
                elif amount <= 0:
                    errors.add("amount", "Amount must be greater than zero", kind="amount", value=raw)
                else:
                    cleaned["amount"] = amount

        if data.get("category") is not None:
            raw = data["category"]
            try:
                cleaned["category"] = parse_enum(BudgetItemCategory, raw)
            except ValueError:
                errors.add(
                    "category",
                    f"Category must be one of: {', '.join(enum_values(BudgetItemCategory))}",
                    kind="category",
                    value=raw,
                )

        for field in ("description", "vendor"):
            if field in data:
                cleaned[field] = clean_text(data[field])

        for field in ("vendor_id", "budget_item_id"):
            if field in data:
                cleaned[field] = data[field]

        errors.raise_if_any(
            "Expense validation failed",
            allowed_categories=enum_values(BudgetItemCategory),
        )
        return cleaned

    async def _check_budget_item_link(
        self,
        event: Event,
        budget_item_id: Optional[uuid.UUID],
        category: Optional[BudgetItemCategory],
    ) -> Optional[BudgetLineItem]:
        """The linked item must belong to the same event and share its category."""
        if budget_item_id is None:
            return None
        result = await self.db.execute(
            select(BudgetLineItem)
            .where(BudgetLineItem.id == budget_item_id)
            .where(BudgetLineItem.event_id == event.id)
        )
        item = result.scalar_one_or_none()
        errors = FieldErrors()
        if item is None:
            errors.add("budget_item_id", "Budget item does not belong to this event")
        elif category is not None and category != item.category:
            errors.add(
                "category",
                f"Category must match the budget item's category ({item.category.value})",
            )
        errors.raise_if_any("Expense validation failed")
        return item

    async def _reload(self, expense_id: uuid.UUID, organization_id: uuid.UUID) -> Expense:
        return await self.get_expense(expense_id, organization_id)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    async def create_expense(
        self,
        data: Dict[str, Any],
        actor: User,
        permissions: BudgetPermissions,
    ) -> Expense:
        """Submit an expense; it starts Pending."""
        require(permissions, BudgetCapability.CREATE_EXPENSE)
        cleaned = self._validate(data, partial=False)
        event = await self.events.get_event(cleaned.pop("event_id"), actor.organization_id)

        item = await self._check_budget_item_link(
            event, cleaned.get("budget_item_id"), cleaned.get("category")
        )
        if cleaned.get("category") is None:
            cleaned["category"] = item.category if item else BudgetItemCategory.MISCELLANEOUS

        expense = Expense(
            event_id=event.id,
            organization_id=event.organization_id,
            created_by_id=actor.id,
            status=ExpenseStatus.PENDING,
            **cleaned,
        )
        self.db.add(expense)
        await self.db.flush()

        await self.activity.log_action(
            ActivityAction.EXPENSE_CREATED,
            user_id=actor.id,
            event_id=event.id,
            details={"expense_id": str(expense.id), "amount": str(expense.amount)},
        )

        approvers = await self.notifications.get_approver_recipients(event.organization_id)
        await self.notifications.notify_users(
            [user_id for user_id in approvers if user_id != actor.id],
            title=f"Expense awaiting approval: {expense.title}",
            message=(
                f"{actor.full_name} submitted '{expense.title}' for "
                f"{expense.amount:,.2f} on event '{event.name}'."
            ),
            notification_type=NotificationType.INFO,
            metadata={"expense_id": str(expense.id), "event_id": str(event.id)},
        )
        await self.db.commit()

        logger.info(f"Expense {expense.id} submitted on event {event.id} by user {actor.id}")
        return await self._reload(expense.id, actor.organization_id)

    async def update_expense(
        self,
        expense_id: uuid.UUID,
        updates: Dict[str, Any],
        actor: User,
        permissions: BudgetPermissions,
    ) -> Expense:
        """Edit a pending expense. Only its creator may edit it."""
        require(permissions, BudgetCapability.CREATE_EXPENSE)
        expense = await self.get_expense(expense_id, actor.organization_id)

        if expense.status is not ExpenseStatus.PENDING:
            logger.warning(f"Edit refused on {expense.status.value} expense {expense.id}")
            raise CannotModifyException("Expense", expense.status.value, "edited")
        if expense.created_by_id != actor.id:
            raise AuthorizationException("Only the creator can edit this expense")

        cleaned = self._validate(updates, partial=True)
        changed = {
            field: value
            for field, value in cleaned.items()
            if field in EDITABLE_FIELDS and getattr(expense, field) != value
        }
        if not changed:
            return expense

        if "budget_item_id" in changed or "category" in changed:
            event = await self.events.get_event(expense.event_id, actor.organization_id)
            await self._check_budget_item_link(
                event,
                changed.get("budget_item_id", expense.budget_item_id),
                changed.get("category", expense.category),
            )

        for field, value in changed.items():
            setattr(expense, field, value)
        await self.db.flush()

        await self.activity.log_action(
            ActivityAction.EXPENSE_UPDATED,
            user_id=actor.id,
            event_id=expense.event_id,
            details={"expense_id": str(expense.id), "changed_fields": sorted(changed)},
        )
        await self.db.commit()

        logger.info(f"Expense {expense.id} updated by user {actor.id}: {sorted(changed)}")
        return await self._reload(expense.id, actor.organization_id)

    async def delete_expense(
        self,
        expense_id: uuid.UUID,
        actor: User,
        permissions: BudgetPermissions,
        confirmed: bool = False,
    ) -> None:
        """Two-phase delete of a pending expense by its creator or an Admin."""
        require(permissions, BudgetCapability.CREATE_EXPENSE)
        expense = await self.get_expense(expense_id, actor.organization_id)

        if expense.status is not ExpenseStatus.PENDING:
            logger.warning(f"Delete refused on {expense.status.value} expense {expense.id}")
            raise CannotModifyException("Expense", expense.status.value, "deleted")
        if expense.created_by_id != actor.id and actor.role is not UserRole.ADMIN:
            raise AuthorizationException("Only the creator or an Admin can delete this expense")

        if not confirmed:
            raise ConfirmationRequiredException(
                "Expense",
                expense.id,
                {
                    "title": expense.title,
                    "amount": str(expense.amount),
                    "status": expense.status.value,
                },
            )

        event_id = expense.event_id
        await self.db.delete(expense)
        await self.activity.log_action(
            ActivityAction.EXPENSE_DELETED,
            user_id=actor.id,
            event_id=event_id,
            details={"expense_id": str(expense_id), "title": expense.title},
        )
        await self.db.commit()

        logger.info(f"Expense {expense_id} deleted by user {actor.id}")

    async def approve_expense(
        self,
        expense_id: uuid.UUID,
        actor: User,
        permissions: BudgetPermissions,
        comments: Optional[str] = None,
    ) -> Expense:
        return await self._decide(expense_id, WorkflowAction.APPROVED, actor, permissions, comments)

    async def reject_expense(
        self,
        expense_id: uuid.UUID,
        actor: User,
        permissions: BudgetPermissions,
        comments: Optional[str] = None,
    ) -> Expense:
        return await self._decide(expense_id, WorkflowAction.REJECTED, actor, permissions, comments)

    async def _decide(
        self,
        expense_id: uuid.UUID,
        action: WorkflowAction,
        actor: User,
        permissions: BudgetPermissions,
        comments: Optional[str],
    ) -> Expense:
        require(permissions, BudgetCapability.APPROVE)
        expense = await self.get_expense(expense_id, actor.organization_id)

        if expense.status.is_terminal:
            logger.warning(
                f"Expense {expense.id} already {expense.status.value}; {action.value} ignored"
            )
            raise ExpenseAlreadyDecidedException(expense.id, expense.status.value, action.value)

        approved = action is WorkflowAction.APPROVED
        expense.status = ExpenseStatus.APPROVED if approved else ExpenseStatus.REJECTED
        self.db.add(
            ExpenseWorkflowEntry(
                expense_id=expense.id,
                approver_id=actor.id,
                action=action,
                comments=clean_text(comments),
                action_at=utcnow(),
            )
        )
        await self.db.flush()

        if approved and expense.budget_item_id:
            await self.budget_items.recalculate_actual_cost(expense.budget_item_id)
            event = await self.events.get_event(expense.event_id, actor.organization_id)
            await self.budget_items.check_budget_alerts(event, actor)

        if expense.created_by_id:
            await self.notifications.create_notification(
                user_id=expense.created_by_id,
                title=f"Expense {expense.status.value}: {expense.title}",
                message=(
                    f"Your expense '{expense.title}' for {expense.amount:,.2f} was "
                    f"{action.value} by {actor.full_name}."
                    + (f" Comments: {clean_text(comments)}" if clean_text(comments) else "")
                ),
                notification_type=NotificationType.SUCCESS if approved else NotificationType.WARNING,
                metadata={"expense_id": str(expense.id), "action": action.value},
            )

        await self.activity.log_action(
            ActivityAction.EXPENSE_APPROVED if approved else ActivityAction.EXPENSE_REJECTED,
            user_id=actor.id,
            event_id=expense.event_id,
            details={"expense_id": str(expense.id), "amount": str(expense.amount)},
        )
        await self.db.commit()

        logger.info(f"Expense {expense.id} {action.value} by user {actor.id}")
        return await self._reload(expense.id, actor.organization_id)
