"""
Event Finance Manager - Permission Resolution Tests
"""

import pytest

from eventfinance.config import Settings
from eventfinance.models.user import UserRole
from eventfinance.utils.error_handling import InsufficientPermissionsException
from eventfinance.utils.permissions import (
    BudgetCapability,
    BudgetPermissions,
    can_change_actual,
    can_change_estimated,
    require,
    resolve_permissions,
)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


class TestResolvePermissions:
    """Tests for resolve_permissions."""

    def test_viewer(self, settings):
        perms = resolve_permissions("Viewer", False, settings)

        assert perms.can_edit_budget is False
        assert perms.is_viewer is True
        assert perms.can_approve is False
        assert perms.can_create_expense is False

    def test_viewer_case_insensitive(self, settings):
        perms = resolve_permissions("viewer", False, settings)
        assert perms.is_viewer is True
        assert perms.can_edit_budget is False

    def test_admin(self, settings):
        perms = resolve_permissions(UserRole.ADMIN, False, settings)

        assert perms.can_edit_budget is True
        assert perms.can_edit_estimated is True
        assert perms.can_edit_actual is True
        assert perms.can_edit_all is True
        assert perms.can_approve is True
        assert perms.can_delete_events is True
        assert perms.is_viewer is False
        assert perms.role == "Admin"

    def test_event_manager(self, settings):
        perms = resolve_permissions(UserRole.EVENT_MANAGER, False, settings)

        assert perms.can_approve is True
        assert perms.can_manage_events is True
        assert perms.can_delete_events is False

    def test_finance_edits_actual_only(self, settings):
        perms = resolve_permissions("FINANCE", False, settings)

        assert perms.can_edit_budget is True
        assert perms.can_edit_actual is True
        assert perms.can_edit_estimated is False
        assert perms.can_edit_all is False
        assert perms.can_approve is False
        assert perms.can_create_expense is True

    def test_configured_extra_role(self, settings):
        perms = resolve_permissions("Marketing", False, settings)

        assert perms.can_edit_budget is True
        assert perms.can_edit_estimated is True
        assert perms.can_edit_actual is False

    @pytest.mark.parametrize("role", [None, "", "   ", "superuser", "guest"])
    def test_unknown_or_absent_role_gets_nothing(self, settings, role):
        perms = resolve_permissions(role, False, settings)

        assert perms.can_edit_budget is False
        assert perms.can_edit_estimated is False
        assert perms.can_edit_actual is False
        assert perms.can_edit_all is False
        assert perms.can_approve is False
        assert perms.is_viewer is False

    @pytest.mark.parametrize("role", [None, "Viewer", "superuser", UserRole.FINANCE])
    def test_demo_mode_grants_everything(self, settings, role):
        perms = resolve_permissions(role, True, settings)

        assert perms.can_edit_budget is True
        assert perms.can_edit_estimated is True
        assert perms.can_edit_actual is True
        assert perms.can_edit_all is True
        assert perms.can_approve is True
        assert perms.can_create_expense is True
        assert perms.can_manage_events is True
        assert perms.can_delete_events is True
        assert perms.is_viewer is False

    def test_allow_lists_come_from_settings(self):
        custom = Settings(_env_file=None, expense_approve_roles="finance")

        assert resolve_permissions("Finance", False, custom).can_approve is True
        assert resolve_permissions("Admin", False, custom).can_approve is False

    def test_resolution_is_pure(self, settings):
        first = resolve_permissions("EventManager", False, settings)
        second = resolve_permissions("EventManager", False, settings)
        assert first == second


class TestRequire:
    """Tests for capability enforcement helpers."""

    def test_require_passes(self):
        require(BudgetPermissions.all(role="Admin"), BudgetCapability.APPROVE)

    def test_require_raises_with_capability_name(self):
        with pytest.raises(InsufficientPermissionsException) as exc_info:
            require(BudgetPermissions.none(role="Viewer"), BudgetCapability.APPROVE)

        assert exc_info.value.status_code == 403
        assert "can_approve" in exc_info.value.message

    def test_edit_all_covers_both_costs(self):
        perms = BudgetPermissions(can_edit_budget=True, can_edit_all=True)

        assert can_change_estimated(perms) is True
        assert can_change_actual(perms) is True

    def test_specific_flag_only(self):
        perms = BudgetPermissions(can_edit_budget=True, can_edit_actual=True)

        assert can_change_estimated(perms) is False
        assert can_change_actual(perms) is True
