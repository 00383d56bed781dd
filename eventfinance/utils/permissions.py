"""
Event Finance Manager - Permissions System

Role-based capabilities for budget and expense work.

Capability Matrix (defaults, configurable through Settings):
============================================================

| Capability          | Admin | EventManager | Finance | Marketing | Accountant | Viewer |
|---------------------|-------|--------------|---------|-----------|------------|--------|
| can_edit_budget     | X     | X            | X       | X         | X          |        |
| can_edit_estimated  | X     | X            |         | X         |            |        |
| can_edit_actual     | X     | X            | X       |           | X          |        |
| can_edit_all        | X     | X            |         |           |            |        |
| can_approve         | X     | X            |         |           |            |        |
| can_create_expense  | X     | X            | X       |           |            |        |
| can_manage_events   | X     | X            |         |           |            |        |
| can_delete_events   | X     |              |         |           |            |        |

Demo mode grants every capability. Unknown or missing roles get none.
"""

from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Dict, Optional, Union

from eventfinance.config import Settings, get_settings
from eventfinance.models.user import UserRole
from eventfinance.utils.error_handling import InsufficientPermissionsException


# ===========================================
# CAPABILITIES
# ===========================================

class BudgetCapability(str, Enum):
    """Capabilities a mutation entry point can require."""
    EDIT_BUDGET = "can_edit_budget"
    EDIT_ESTIMATED = "can_edit_estimated"
    EDIT_ACTUAL = "can_edit_actual"
    EDIT_ALL = "can_edit_all"
    APPROVE = "can_approve"
    CREATE_EXPENSE = "can_create_expense"
    MANAGE_EVENTS = "can_manage_events"
    DELETE_EVENTS = "can_delete_events"


VIEWER_ROLE = UserRole.VIEWER.value.lower()


@dataclass(frozen=True)
class BudgetPermissions:
    """Capability flags resolved for one request."""
    can_edit_budget: bool = False
    can_edit_estimated: bool = False
    can_edit_actual: bool = False
    can_edit_all: bool = False
    can_approve: bool = False
    is_viewer: bool = False
    can_create_expense: bool = False
    can_manage_events: bool = False
    can_delete_events: bool = False
    role: Optional[str] = None

    @classmethod
    def none(cls, role: Optional[str] = None) -> "BudgetPermissions":
        return cls(role=role)

    @classmethod
    def all(cls, role: Optional[str] = None) -> "BudgetPermissions":
        flags = {f.name: True for f in fields(cls) if f.name not in ("is_viewer", "role")}
        return cls(is_viewer=False, role=role, **flags)

    def has(self, capability: BudgetCapability) -> bool:
        return bool(getattr(self, capability.value))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _role_key(role: Union[UserRole, str, None]) -> str:
    if role is None:
        return ""
    if isinstance(role, UserRole):
        return role.value.lower()
    return str(role).strip().lower()


def _role_label(role: Union[UserRole, str, None]) -> Optional[str]:
    if role is None:
        return None
    if isinstance(role, UserRole):
        return role.value
    return str(role).strip() or None


def resolve_permissions(
    role: Union[UserRole, str, None],
    is_demo_mode: bool,
    settings: Optional[Settings] = None,
) -> BudgetPermissions:
    """
    Derive capability flags from a role and the demo-mode flag.

    Pure: no I/O beyond reading the cached settings, safe to call per request.
    """
    label = _role_label(role)

    if is_demo_mode:
        return BudgetPermissions.all(role=label)

    settings = settings or get_settings()
    key = _role_key(role)
    if not key:
        return BudgetPermissions.none()

    allow_lists = (
        settings.budget_edit_estimated_roles_list,
        settings.budget_edit_actual_roles_list,
        settings.budget_edit_all_roles_list,
        settings.expense_approve_roles_list,
        settings.expense_create_roles_list,
        settings.event_manage_roles_list,
        settings.event_delete_roles_list,
    )
    recognised = UserRole.parse(key) is not None or any(key in roles for roles in allow_lists)
    if not recognised:
        return BudgetPermissions.none(role=label)

    return BudgetPermissions(
        can_edit_budget=key != VIEWER_ROLE,
        can_edit_estimated=key in settings.budget_edit_estimated_roles_list,
        can_edit_actual=key in settings.budget_edit_actual_roles_list,
        can_edit_all=key in settings.budget_edit_all_roles_list,
        can_approve=key in settings.expense_approve_roles_list,
        is_viewer=key == VIEWER_ROLE,
        can_create_expense=key in settings.expense_create_roles_list,
        can_manage_events=key in settings.event_manage_roles_list,
        can_delete_events=key in settings.event_delete_roles_list,
        role=label,
    )


def require(permissions: BudgetPermissions, capability: BudgetCapability) -> None:
    """Raise InsufficientPermissionsException unless the capability is granted."""
    if not permissions.has(capability):
        raise InsufficientPermissionsException(
            required_permission=capability.value,
            user_role=permissions.role,
        )


def can_change_estimated(permissions: BudgetPermissions) -> bool:
    return permissions.can_edit_estimated or permissions.can_edit_all


def can_change_actual(permissions: BudgetPermissions) -> bool:
    return permissions.can_edit_actual or permissions.can_edit_all
