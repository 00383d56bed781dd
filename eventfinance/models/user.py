"""
Event Finance Manager - User and Organization Models

Users belong to exactly one organization and carry a single role.

Roles:
   - Admin: Full access, final say on expenses and deletes
   - EventManager: Runs events, edits budgets, approves expenses
   - Finance: Records actual spend and submits expenses
   - Viewer: Read-only
"""

import uuid
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventfinance.models.base import BaseModel, enum_column

if TYPE_CHECKING:
    from eventfinance.models.event import Event


class UserRole(str, Enum):
    """Organization roles, persisted by value."""
    ADMIN = "Admin"
    EVENT_MANAGER = "EventManager"
    FINANCE = "Finance"
    VIEWER = "Viewer"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["UserRole"]:
        """Case-insensitive lookup; returns None for unknown roles."""
        if not value:
            return None
        lowered = str(value).strip().lower()
        for role in cls:
            if role.value.lower() == lowered:
                return role
        return None


class Organization(BaseModel):
    """Tenant that owns users, events and vendors."""

    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    users: Mapped[List["User"]] = relationship(
        "User",
        back_populates="organization",
    )
    events: Mapped[List["Event"]] = relationship(
        "Event",
        back_populates="organization",
    )

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, name={self.name})>"


class User(BaseModel):
    """
    Application user.

    Authentication happens upstream; this record only carries identity,
    organization membership and the role the permission resolver reads.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        enum_column(UserRole, "user_role"),
        nullable=False,
        default=UserRole.VIEWER,
    )
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    organization: Mapped["Organization"] = relationship(
        "Organization",
        back_populates="users",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
