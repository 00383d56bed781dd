"""
Event Finance Manager - Event Models

Events are the budgeting scope: every budget line item and expense
belongs to exactly one event.
"""

import uuid
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Date, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventfinance.models.base import BaseModel, enum_column

if TYPE_CHECKING:
    from eventfinance.models.budget import BudgetLineItem
    from eventfinance.models.expense import Expense
    from eventfinance.models.user import Organization


class EventStatus(str, Enum):
    """Event lifecycle status."""
    PLANNING = "Planning"
    ACTIVE = "Active"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class Event(BaseModel):
    """An organized event with an optional overall budget."""

    __tablename__ = "events"

    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    venue: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Overall event budget; budget line items are capped against it
    budget: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)

    status: Mapped[EventStatus] = mapped_column(
        enum_column(EventStatus, "event_status"),
        nullable=False,
        default=EventStatus.PLANNING,
    )
    created_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    organization: Mapped["Organization"] = relationship(
        "Organization",
        back_populates="events",
    )
    budget_items: Mapped[List["BudgetLineItem"]] = relationship(
        "BudgetLineItem",
        back_populates="event",
        cascade="all, delete-orphan",
    )
    expenses: Mapped[List["Expense"]] = relationship(
        "Expense",
        back_populates="event",
        cascade="all, delete-orphan",
    )
    strategic_goals: Mapped[List["StrategicGoal"]] = relationship(
        "StrategicGoal",
        back_populates="event",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, name={self.name}, status={self.status})>"


class StrategicGoal(BaseModel):
    """Goal a budget line item can be mapped to."""

    __tablename__ = "strategic_goals"

    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    event: Mapped["Event"] = relationship("Event", back_populates="strategic_goals")
