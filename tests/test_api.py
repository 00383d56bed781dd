"""
Event Finance Manager - API Integration Tests

Integration tests for REST API endpoints.
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from httpx import AsyncClient

from eventfinance.config import Settings, get_settings
from eventfinance.utils.security import create_access_token
from main import app


API = "/api/v1"


def use_settings(**overrides) -> None:
    """Swap the settings dependency for this test; the client fixture clears it."""
    custom = Settings(_env_file=None, **overrides)
    app.dependency_overrides[get_settings] = lambda: custom


class TestHealthEndpoint:
    """Test health check endpoint."""

    @pytest.mark.asyncio
    async def test_health_check(self, client: AsyncClient):
        """Test health check returns 200."""
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestAuthentication:
    """Test token handling."""

    @pytest.mark.asyncio
    async def test_no_token(self, client: AsyncClient):
        response = await client.get(f"{API}/events")

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "UNAUTHORIZED"
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_invalid_token(self, client: AsyncClient):
        response = await client.get(
            f"{API}/events", headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "UNAUTHORIZED"
        assert response.json()["detail"]["message"] == "Invalid or expired token"
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_token_for_unknown_user(self, client: AsyncClient):
        token = create_access_token({"sub": str(uuid4())})

        response = await client.get(f"{API}/events", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["detail"]["message"] == "User not found"
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_deactivated_user(self, client: AsyncClient, db_session, viewer_user, auth_headers):
        viewer_user.is_active = False
        await db_session.commit()

        response = await client.get(f"{API}/events", headers=auth_headers(viewer_user))

        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "FORBIDDEN"
        assert "www-authenticate" not in response.headers

    @pytest.mark.asyncio
    async def test_cookie_token(self, client: AsyncClient, manager_user, auth_headers):
        token = auth_headers(manager_user)["Authorization"].split(" ", 1)[1]
        client.cookies.set("access_token", token)

        response = await client.get(f"{API}/events")

        assert response.status_code == 200


class TestEventsAPI:
    """Test event endpoints."""

    @pytest.mark.asyncio
    async def test_create_event(self, client: AsyncClient, manager_user, auth_headers):
        response = await client.post(
            f"{API}/events",
            json={"name": "Product Launch", "budget": "5000", "start_date": "2026-11-01"},
            headers=auth_headers(manager_user),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Product Launch"
        assert data["status"] == "Planning"
        assert isinstance(data["budget"], str)
        assert Decimal(data["budget"]) == Decimal("5000")

    @pytest.mark.asyncio
    async def test_create_event_reports_every_field(self, client: AsyncClient, manager_user, auth_headers):
        response = await client.post(
            f"{API}/events",
            json={"name": "  ", "budget": "-1", "start_date": "2026-11-02", "end_date": "2026-11-01"},
            headers=auth_headers(manager_user),
        )

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["code"] == "VALIDATION_ERROR"
        fields = sorted(error["field"] for error in detail["details"]["errors"])
        assert fields == ["budget", "end_date", "name"]

    @pytest.mark.asyncio
    async def test_event_budget_must_fit_money_column(self, client: AsyncClient, manager_user, auth_headers):
        headers = auth_headers(manager_user)

        response = await client.post(f"{API}/events", json={"name": "Expo", "budget": "1e12"}, headers=headers)

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["code"] == "INVALID_AMOUNT"
        assert detail["field"] == "budget"

        response = await client.post(f"{API}/events", json={"name": "Expo", "budget": "2500.555"}, headers=headers)

        assert response.status_code == 201
        assert Decimal(response.json()["budget"]) == Decimal("2500.56")

    @pytest.mark.asyncio
    async def test_viewer_cannot_create_event(self, client: AsyncClient, viewer_user, auth_headers):
        response = await client.post(
            f"{API}/events", json={"name": "Gala"}, headers=auth_headers(viewer_user)
        )

        assert response.status_code == 403
        detail = response.json()["detail"]
        assert detail["code"] == "INSUFFICIENT_PERMISSIONS"
        assert detail["details"]["current_role"] == "Viewer"

    @pytest.mark.asyncio
    async def test_list_and_filter(self, client: AsyncClient, test_event, viewer_user, auth_headers):
        response = await client.get(f"{API}/events", headers=auth_headers(viewer_user))
        assert response.status_code == 200
        assert response.json()["total"] == 1

        response = await client.get(
            f"{API}/events", params={"status": "Active"}, headers=auth_headers(viewer_user)
        )
        assert response.json()["total"] == 0

    @pytest.mark.asyncio
    async def test_status_change(self, client: AsyncClient, test_event, manager_user, auth_headers):
        response = await client.patch(
            f"{API}/events/{test_event.id}",
            json={"status": "Active"},
            headers=auth_headers(manager_user),
        )

        assert response.status_code == 200
        assert response.json()["status"] == "Active"

    @pytest.mark.asyncio
    async def test_other_organization_is_not_found(
        self, client: AsyncClient, test_event, outsider_user, auth_headers
    ):
        response = await client.get(f"{API}/events/{test_event.id}", headers=auth_headers(outsider_user))

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "EVENT_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_two_phase_delete(self, client: AsyncClient, test_event, admin_user, auth_headers):
        url = f"{API}/events/{test_event.id}"

        response = await client.delete(url, headers=auth_headers(admin_user))
        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["code"] == "CONFIRMATION_REQUIRED"
        assert detail["details"]["summary"]["name"] == "Annual Conference"

        response = await client.delete(url, params={"confirm": "true"}, headers=auth_headers(admin_user))
        assert response.status_code == 204

        response = await client.get(url, headers=auth_headers(admin_user))
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_manager_cannot_delete_event(self, client: AsyncClient, test_event, manager_user, auth_headers):
        response = await client.delete(
            f"{API}/events/{test_event.id}",
            params={"confirm": "true"},
            headers=auth_headers(manager_user),
        )

        assert response.status_code == 403


class TestBudgetItemsAPI:
    """Test budget item endpoints."""

    @pytest.mark.asyncio
    async def test_crud_flow(self, client: AsyncClient, test_event, manager_user, auth_headers):
        headers = auth_headers(manager_user)
        base = f"{API}/events/{test_event.id}/budget-items"

        response = await client.post(
            base,
            json={"category": "Venue", "description": "Hall", "estimated_cost": "4000", "actual_cost": "4500"},
            headers=headers,
        )
        assert response.status_code == 201
        item = response.json()
        assert item["status"] == "Pending"
        assert Decimal(item["variance"]) == Decimal("-500")
        assert item["variance_label"] == "over"

        response = await client.patch(
            f"{base}/{item['id']}", json={"actual_cost": "3000"}, headers=headers
        )
        assert response.status_code == 200
        assert response.json()["variance_label"] == "under"

        response = await client.get(base, headers=headers)
        data = response.json()
        assert data["total"] == 1
        assert Decimal(data["totals"]["percentage_spent"]) == Decimal("75")

        response = await client.delete(f"{base}/{item['id']}", headers=headers)
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "CONFIRMATION_REQUIRED"

        response = await client.delete(f"{base}/{item['id']}", params={"confirm": "true"}, headers=headers)
        assert response.status_code == 204

        response = await client.get(f"{base}/{item['id']}", headers=headers)
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "BUDGET_ITEM_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_validation_lists_all_fields(self, client: AsyncClient, test_event, manager_user, auth_headers):
        response = await client.post(
            f"{API}/events/{test_event.id}/budget-items",
            json={"category": "Unicorns", "description": ""},
            headers=auth_headers(manager_user),
        )

        assert response.status_code == 422
        errors = response.json()["detail"]["details"]["errors"]
        assert sorted(error["field"] for error in errors) == ["category", "description"]

    @pytest.mark.asyncio
    async def test_budget_cap(self, client: AsyncClient, test_event, manager_user, auth_headers):
        response = await client.post(
            f"{API}/events/{test_event.id}/budget-items",
            json={"category": "Venue", "description": "Stadium", "estimated_cost": "10000.01"},
            headers=auth_headers(manager_user),
        )

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "BUDGET_EXCEEDED"

    @pytest.mark.asyncio
    async def test_summary(self, client: AsyncClient, test_event, manager_user, auth_headers):
        headers = auth_headers(manager_user)
        base = f"{API}/events/{test_event.id}/budget-items"
        await client.post(
            base,
            json={"category": "Venue", "description": "Hall", "estimated_cost": "1000", "actual_cost": "950"},
            headers=headers,
        )
        await client.post(
            base,
            json={"category": "Catering", "description": "Lunch", "estimated_cost": "1000", "actual_cost": "900"},
            headers=headers,
        )

        response = await client.get(f"{base}/summary", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["item_count"] == 2
        assert list(data["category_totals"]) == ["Venue", "Catering"]
        assert data["status"]["label"] == "Over Budget"
        assert data["variance"]["is_over_budget"] is False
        assert Decimal(data["variance"]["variance_percentage"]) == Decimal("-7.50")


class TestExpensesAPI:
    """Test expense endpoints."""

    async def _submit(self, client, event, user, auth_headers, amount="120.00"):
        response = await client.post(
            f"{API}/expenses",
            json={"event_id": str(event.id), "title": "Printing", "amount": amount, "category": "Marketing"},
            headers=auth_headers(user),
        )
        assert response.status_code == 201
        return response.json()

    @pytest.mark.asyncio
    async def test_submit_and_approve(
        self, client: AsyncClient, test_event, finance_user, manager_user, auth_headers
    ):
        expense = await self._submit(client, test_event, finance_user, auth_headers)
        assert expense["status"] == "Pending"
        assert Decimal(expense["amount"]) == Decimal("120")

        response = await client.post(
            f"{API}/expenses/{expense['id']}/approve",
            json={"comments": "Within budget"},
            headers=auth_headers(manager_user),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "Approved"
        assert data["workflow_entries"][0]["action"] == "approved"
        assert data["workflow_entries"][0]["comments"] == "Within budget"

        response = await client.post(
            f"{API}/expenses/{expense['id']}/approve", headers=auth_headers(manager_user)
        )
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "ALREADY_PROCESSED"

        response = await client.post(
            f"{API}/expenses/{expense['id']}/reject", headers=auth_headers(manager_user)
        )
        assert response.status_code == 409

        response = await client.get(f"{API}/expenses/{expense['id']}", headers=auth_headers(finance_user))
        assert response.json()["status"] == "Approved"
        assert len(response.json()["workflow_entries"]) == 1

    @pytest.mark.asyncio
    async def test_finance_cannot_approve(
        self, client: AsyncClient, test_event, finance_user, auth_headers
    ):
        expense = await self._submit(client, test_event, finance_user, auth_headers)

        response = await client.post(
            f"{API}/expenses/{expense['id']}/approve", headers=auth_headers(finance_user)
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_invalid_amount(self, client: AsyncClient, test_event, finance_user, auth_headers):
        response = await client.post(
            f"{API}/expenses",
            json={"event_id": str(test_event.id), "title": "Printing", "amount": "0"},
            headers=auth_headers(finance_user),
        )

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "INVALID_AMOUNT"

    @pytest.mark.asyncio
    async def test_edit_after_decision(
        self, client: AsyncClient, test_event, finance_user, manager_user, auth_headers
    ):
        expense = await self._submit(client, test_event, finance_user, auth_headers)
        await client.post(f"{API}/expenses/{expense['id']}/reject", headers=auth_headers(manager_user))

        response = await client.patch(
            f"{API}/expenses/{expense['id']}", json={"title": "Reprint"}, headers=auth_headers(finance_user)
        )

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "CANNOT_MODIFY"

    @pytest.mark.asyncio
    async def test_filters_and_summary(
        self, client: AsyncClient, test_event, finance_user, manager_user, auth_headers
    ):
        first = await self._submit(client, test_event, finance_user, auth_headers, amount="100")
        await self._submit(client, test_event, finance_user, auth_headers, amount="50")
        await client.post(f"{API}/expenses/{first['id']}/approve", headers=auth_headers(manager_user))
        headers = auth_headers(finance_user)

        response = await client.get(f"{API}/expenses", params={"status": "Pending"}, headers=headers)
        assert response.json()["total"] == 1

        response = await client.get(f"{API}/expenses", params={"category": "Marketing"}, headers=headers)
        assert response.json()["total"] == 2

        response = await client.get(f"{API}/expenses", params={"category": "Snacks"}, headers=headers)
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "INVALID_CATEGORY"

        response = await client.get(
            f"{API}/expenses/summary", params={"event_id": str(test_event.id)}, headers=headers
        )
        summary = response.json()
        assert Decimal(summary["total_allocated"]) == Decimal("150")
        assert Decimal(summary["total_spent"]) == Decimal("100")
        assert summary["pending_count"] == 1

    @pytest.mark.asyncio
    async def test_unknown_expense(self, client: AsyncClient, finance_user, auth_headers):
        response = await client.get(f"{API}/expenses/{uuid4()}", headers=auth_headers(finance_user))

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "EXPENSE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_two_phase_delete(self, client: AsyncClient, test_event, finance_user, auth_headers):
        expense = await self._submit(client, test_event, finance_user, auth_headers)
        url = f"{API}/expenses/{expense['id']}"

        response = await client.delete(url, headers=auth_headers(finance_user))
        assert response.status_code == 409

        response = await client.delete(url, params={"confirm": "true"}, headers=auth_headers(finance_user))
        assert response.status_code == 204


class TestDashboardAPI:
    """Test dashboard endpoint."""

    @pytest.mark.asyncio
    async def test_dashboard(self, client: AsyncClient, test_event, admin_user, auth_headers):
        headers = auth_headers(admin_user)
        await client.post(
            f"{API}/events/{test_event.id}/budget-items",
            json={"category": "Venue", "description": "Hall", "estimated_cost": "8000", "actual_cost": "12000"},
            headers=headers,
        )

        response = await client.get(f"{API}/dashboard", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["events"][0]["progress"] == 100
        assert Decimal(data["totals"]["utilization_percentage"]) == Decimal("120")
        assert data["totals"]["status"]["label"] == "Over Budget"
        assert data["status_counts"]["Planning"] == 1


class TestMeAPI:
    """Test current-user endpoints."""

    @pytest.mark.asyncio
    async def test_viewer_permissions(self, client: AsyncClient, viewer_user, auth_headers):
        response = await client.get(f"{API}/me/permissions", headers=auth_headers(viewer_user))

        assert response.status_code == 200
        data = response.json()
        assert data["is_viewer"] is True
        assert data["can_edit_budget"] is False
        assert data["is_demo_mode"] is False

    @pytest.mark.asyncio
    async def test_global_demo_mode(self, client: AsyncClient, viewer_user, auth_headers):
        use_settings(demo_mode=True)

        response = await client.get(f"{API}/me/permissions", headers=auth_headers(viewer_user))

        data = response.json()
        assert data["is_demo_mode"] is True
        assert data["is_viewer"] is False
        assert data["can_approve"] is True
        assert data["can_edit_all"] is True

    @pytest.mark.asyncio
    async def test_demo_session_header(self, client: AsyncClient, viewer_user, auth_headers):
        headers = auth_headers(viewer_user)

        response = await client.get(f"{API}/me/permissions", headers={**headers, "X-Demo-Mode": "true"})
        assert response.json()["is_demo_mode"] is False

        use_settings(allow_demo_sessions=True)
        response = await client.get(f"{API}/me/permissions", headers={**headers, "X-Demo-Mode": "true"})
        assert response.json()["is_demo_mode"] is True
        assert response.json()["can_edit_budget"] is True

    @pytest.mark.asyncio
    async def test_notifications(
        self, client: AsyncClient, test_event, finance_user, manager_user, auth_headers
    ):
        response = await client.post(
            f"{API}/expenses",
            json={"event_id": str(test_event.id), "title": "Badges", "amount": "30"},
            headers=auth_headers(finance_user),
        )
        await client.post(
            f"{API}/expenses/{response.json()['id']}/reject",
            json={"comments": "Use last year's"},
            headers=auth_headers(manager_user),
        )

        response = await client.get(f"{API}/me/notifications", headers=auth_headers(finance_user))
        notifications = response.json()
        assert len(notifications) == 1
        assert notifications[0]["type"] == "Warning"
        assert notifications[0]["is_read"] is False

        response = await client.post(f"{API}/me/notifications/read", headers=auth_headers(finance_user))
        assert response.json()["updated"] == 1

        response = await client.get(
            f"{API}/me/notifications", params={"unread_only": "true"}, headers=auth_headers(finance_user)
        )
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_event_activity(self, client: AsyncClient, test_event, manager_user, auth_headers):
        headers = auth_headers(manager_user)
        await client.post(
            f"{API}/events/{test_event.id}/budget-items",
            json={"category": "Logistics", "description": "Shuttle"},
            headers=headers,
        )

        response = await client.get(f"{API}/events/{test_event.id}/activity", headers=headers)

        assert response.status_code == 200
        assert [entry["action"] for entry in response.json()] == ["budget-item.created"]
