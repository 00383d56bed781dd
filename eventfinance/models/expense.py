"""
Event Finance Manager - Expense Models

Expenses are actual incurred costs that go through a single approval step.
Every approve/reject decision is appended to the expense's workflow history;
workflow entries are never updated or deleted on their own.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventfinance.models.base import BaseModel, enum_column, utcnow
from eventfinance.models.budget import BudgetItemCategory

if TYPE_CHECKING:
    from eventfinance.models.budget import BudgetLineItem
    from eventfinance.models.event import Event
    from eventfinance.models.user import User


class ExpenseStatus(str, Enum):
    """Expense approval status. Approved and Rejected are terminal."""
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not ExpenseStatus.PENDING


class WorkflowAction(str, Enum):
    """Decision recorded in an expense workflow entry."""
    APPROVED = "approved"
    REJECTED = "rejected"


class Expense(BaseModel):
    """Incurred cost awaiting or past approval."""

    __tablename__ = "expenses"
    __table_args__ = (
        CheckConstraint("amount > 0", name="amount_positive"),
    )

    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    budget_item_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("budget_line_items.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    category: Mapped[BudgetItemCategory] = mapped_column(
        enum_column(BudgetItemCategory, "expense_category"),
        nullable=False,
        default=BudgetItemCategory.MISCELLANEOUS,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    vendor: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    vendor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("vendors.id", ondelete="SET NULL"),
        nullable=True,
    )
    status: Mapped[ExpenseStatus] = mapped_column(
        enum_column(ExpenseStatus, "expense_status"),
        nullable=False,
        default=ExpenseStatus.PENDING,
        index=True,
    )
    created_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    event: Mapped["Event"] = relationship("Event", back_populates="expenses")
    budget_item: Mapped[Optional["BudgetLineItem"]] = relationship("BudgetLineItem")
    creator: Mapped[Optional["User"]] = relationship(
        "User",
        foreign_keys=[created_by_id],
        lazy="selectin",
    )
    workflow_entries: Mapped[List["ExpenseWorkflowEntry"]] = relationship(
        "ExpenseWorkflowEntry",
        back_populates="expense",
        order_by="ExpenseWorkflowEntry.action_at",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Expense(id={self.id}, title={self.title}, amount={self.amount}, status={self.status})>"


class ExpenseWorkflowEntry(BaseModel):
    """Append-only record of an approve/reject decision."""

    __tablename__ = "expense_workflow_entries"

    expense_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("expenses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    approver_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    action: Mapped[WorkflowAction] = mapped_column(
        enum_column(WorkflowAction, "workflow_action"),
        nullable=False,
    )
    comments: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    action_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    expense: Mapped["Expense"] = relationship("Expense", back_populates="workflow_entries")
    approver: Mapped[Optional["User"]] = relationship("User", lazy="selectin")
