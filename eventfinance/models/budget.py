"""
Event Finance Manager - Budget Line Item Model

One planned expenditure within an event. Variance is always derived from
estimated and actual cost and is never stored.
"""

import uuid
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventfinance.models.base import AuditMixin, BaseModel, enum_column
from eventfinance.utils.money import calculate_variance

if TYPE_CHECKING:
    from eventfinance.models.event import Event, StrategicGoal
    from eventfinance.models.user import User
    from eventfinance.models.vendor import Vendor


class BudgetItemCategory(str, Enum):
    """Fixed spending categories shared by budget items and expenses."""
    VENUE = "Venue"
    CATERING = "Catering"
    MARKETING = "Marketing"
    LOGISTICS = "Logistics"
    ENTERTAINMENT = "Entertainment"
    STAFF_TRAVEL = "StaffTravel"
    MISCELLANEOUS = "Miscellaneous"


class BudgetItemStatus(str, Enum):
    """Budget line item status."""
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class BudgetLineItem(BaseModel, AuditMixin):
    """Planned expenditure for an event."""

    __tablename__ = "budget_line_items"
    __table_args__ = (
        CheckConstraint(
            "estimated_cost IS NULL OR estimated_cost >= 0",
            name="estimated_cost_non_negative",
        ),
        CheckConstraint(
            "actual_cost IS NULL OR actual_cost >= 0",
            name="actual_cost_non_negative",
        ),
    )

    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    category: Mapped[BudgetItemCategory] = mapped_column(
        enum_column(BudgetItemCategory, "budget_item_category"),
        nullable=False,
    )
    subcategory: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    estimated_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    actual_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    status: Mapped[BudgetItemStatus] = mapped_column(
        enum_column(BudgetItemStatus, "budget_item_status"),
        nullable=False,
        default=BudgetItemStatus.PENDING,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    assigned_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    # Free-text vendor name, or a link to a known vendor
    vendor: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    vendor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("vendors.id", ondelete="SET NULL"),
        nullable=True,
    )
    strategic_goal_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("strategic_goals.id", ondelete="SET NULL"),
        nullable=True,
    )
    # Storage reference for an uploaded attachment
    file_attachment: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    event: Mapped["Event"] = relationship("Event", back_populates="budget_items")
    assigned_user: Mapped[Optional["User"]] = relationship(
        "User",
        foreign_keys=[assigned_user_id],
        lazy="selectin",
    )
    vendor_link: Mapped[Optional["Vendor"]] = relationship("Vendor", lazy="selectin")
    strategic_goal: Mapped[Optional["StrategicGoal"]] = relationship(
        "StrategicGoal",
        lazy="selectin",
    )

    @property
    def variance(self) -> Decimal:
        """Estimated minus actual cost; negative means over budget."""
        return calculate_variance(self.estimated_cost, self.actual_cost)

    def __repr__(self) -> str:
        return f"<BudgetLineItem(id={self.id}, category={self.category}, description={self.description})>"
