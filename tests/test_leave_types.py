"""Leave type tests — public listing, HR CRUD, guarded soft delete."""

from __future__ import annotations

from leavedesk.common.constants import LeaveCategory
from leavedesk.leave.models import LeaveType
from tests.conftest import future_monday, make_leave_type, make_request


class TestLeaveTypes:

    async def test_list_shows_active_only(self, client, db):
        await make_leave_type(db, name="Sick Leave", default_days=10)
        await make_leave_type(db, name="Annual Leave", default_days=24)
        await make_leave_type(db, name="Sabbatical", is_active=False)

        resp = await client.get("/api/v1/leave-types")
        assert resp.status_code == 200
        assert [t["name"] for t in resp.json()] == ["Annual Leave", "Sick Leave"]

    async def test_create_with_default_color(self, client, hr_headers):
        resp = await client.post(
            "/api/v1/leave-types",
            json={"name": "Paternity Leave", "default_days": 15, "category": "paternity"},
            headers=hr_headers,
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["color"] == "#3B82F6"
        assert body["category"] == "paternity"
        assert body["is_active"] is True

    async def test_duplicate_name_case_insensitive(self, client, annual_leave, hr_headers):
        resp = await client.post(
            "/api/v1/leave-types",
            json={"name": "annual leave", "default_days": 12},
            headers=hr_headers,
        )
        assert resp.status_code == 409
        assert resp.json()["detail"] == "Leave type with this name already exists"

    async def test_bad_color_rejected(self, client, hr_headers):
        resp = await client.post(
            "/api/v1/leave-types",
            json={"name": "Study Leave", "default_days": 5, "color": "blue"},
            headers=hr_headers,
        )
        assert resp.status_code == 422
        assert "color" in resp.json()["errors"]

    async def test_update(self, client, annual_leave, hr_headers):
        resp = await client.put(
            f"/api/v1/leave-types/{annual_leave.id}",
            json={"default_days": 20, "color": "#EF4444"},
            headers=hr_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["default_days"] == 20
        assert resp.json()["color"] == "#EF4444"

    async def test_employee_cannot_create(self, client, auth_headers):
        resp = await client.post(
            "/api/v1/leave-types",
            json={"name": "Study Leave", "default_days": 5},
            headers=auth_headers,
        )
        assert resp.status_code == 403

    async def test_delete_unused_type(self, client, db, annual_leave, hr_headers):
        resp = await client.delete(f"/api/v1/leave-types/{annual_leave.id}", headers=hr_headers)
        assert resp.status_code == 200
        assert resp.json()["message"] == "Leave type deleted successfully"

        row = await db.get(LeaveType, annual_leave.id, populate_existing=True)
        assert row.is_active is False

    async def test_delete_blocked_when_in_use(self, client, db, employee, annual_leave, hr_headers):
        await make_request(db, employee, annual_leave, start=future_monday())

        resp = await client.delete(f"/api/v1/leave-types/{annual_leave.id}", headers=hr_headers)
        assert resp.status_code == 422
        assert resp.json()["detail"] == (
            "Cannot delete leave type that is being used in leave requests"
        )

    async def test_category_change_blocked_when_in_use(self, client, db, employee, hr_headers):
        unpaid = await make_leave_type(
            db, name="Unpaid Leave", default_days=0, category=LeaveCategory.unpaid,
        )
        await make_request(db, employee, unpaid, start=future_monday())

        resp = await client.put(
            f"/api/v1/leave-types/{unpaid.id}",
            json={"category": "standard"},
            headers=hr_headers,
        )
        assert resp.status_code == 422
        assert resp.json()["detail"] == (
            "Cannot change category of leave type that is being used in leave requests"
        )

        row = await db.get(LeaveType, unpaid.id, populate_existing=True)
        assert row.category == LeaveCategory.unpaid

    async def test_same_category_accepted_when_in_use(self, client, db, employee, annual_leave, hr_headers):
        await make_request(db, employee, annual_leave, start=future_monday())

        resp = await client.put(
            f"/api/v1/leave-types/{annual_leave.id}",
            json={"category": "standard", "color": "#10B981"},
            headers=hr_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["color"] == "#10B981"

    async def test_category_change_allowed_when_unused(self, client, db, hr_headers):
        unpaid = await make_leave_type(
            db, name="Unpaid Leave", default_days=0, category=LeaveCategory.unpaid,
        )
        resp = await client.put(
            f"/api/v1/leave-types/{unpaid.id}",
            json={"category": "standard", "default_days": 5},
            headers=hr_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["category"] == "standard"
