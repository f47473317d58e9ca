"""Leave module test suite — application checks, lifecycle transitions,
balance debits, listings and the HTTP endpoints.

Dates are computed relative to today so requests are always in the future.
"""

from __future__ import annotations

import uuid
from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.constants import GenderType, HalfDaySession, LeaveCategory, LeaveStatus
from leavedesk.common.exceptions import (
    AlreadyProcessedException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from leavedesk.common.pagination import PaginationParams
from leavedesk.leave import calendar
from leavedesk.leave.schemas import LeaveRequestCreate
from leavedesk.leave.service import LeaveService
from tests.conftest import (
    auth_headers_for,
    future_monday,
    future_saturday,
    make_balance,
    make_employee,
    make_holiday,
    make_leave_type,
    make_request,
)

REASON = "Family function out of town"
PAGE = PaginationParams(page=1, page_size=50, sort=None)


def _apply(leave_type_id: uuid.UUID, start: date, end: date | None = None, **kwargs):
    return LeaveRequestCreate(
        leave_type_id=leave_type_id,
        start_date=start,
        end_date=end or start,
        reason=kwargs.pop("reason", REASON),
        **kwargs,
    )


# ═════════════════════════════════════════════════════════════════════
# Application checks
# ═════════════════════════════════════════════════════════════════════


class TestApply:

    async def test_full_week_counts_working_days(self, db: AsyncSession, employee, annual_leave):
        await make_balance(db, employee, annual_leave)
        monday = future_monday()

        out = await LeaveService.validate_and_create_request(
            db, employee.id, _apply(annual_leave.id, monday, monday + timedelta(days=6)),
        )

        assert out.status == LeaveStatus.pending
        assert out.total_days == Decimal("5")
        assert out.employee.name == "John Doe"
        assert out.leave_type.name == "Annual Leave"

    async def test_holiday_inside_range_is_not_counted(self, db, employee, annual_leave):
        await make_balance(db, employee, annual_leave)
        monday = future_monday()
        await make_holiday(db, monday + timedelta(days=2))

        out = await LeaveService.validate_and_create_request(
            db, employee.id, _apply(annual_leave.id, monday, monday + timedelta(days=4)),
        )
        assert out.total_days == Decimal("4")

    async def test_half_day_counts_half(self, db, employee, annual_leave):
        await make_balance(db, employee, annual_leave)
        monday = future_monday()

        out = await LeaveService.validate_and_create_request(
            db, employee.id,
            _apply(annual_leave.id, monday, is_half_day=True, half_day_session=HalfDaySession.AM),
        )
        assert out.total_days == Decimal("0.5")
        assert out.half_day_session == HalfDaySession.AM

    async def test_past_dates_rejected(self, db, employee, annual_leave):
        yesterday = calendar.today() - timedelta(days=1)
        with pytest.raises(ValidationException) as exc:
            await LeaveService.validate_and_create_request(
                db, employee.id, _apply(annual_leave.id, yesterday),
            )
        assert exc.value.detail == "Cannot apply for leave in the past"

    async def test_before_joining_date_rejected(self, db, annual_leave):
        monday = future_monday(weeks_ahead=2)
        joiner = await make_employee(db, joining_date=monday + timedelta(days=7))
        await make_balance(db, joiner, annual_leave)

        with pytest.raises(ValidationException) as exc:
            await LeaveService.validate_and_create_request(
                db, joiner.id, _apply(annual_leave.id, monday),
            )
        assert exc.value.detail == "Cannot apply for leave before joining date"

    async def test_unknown_leave_type(self, db, employee):
        with pytest.raises(NotFoundException) as exc:
            await LeaveService.validate_and_create_request(
                db, employee.id, _apply(uuid.uuid4(), future_monday()),
            )
        assert exc.value.detail == "Leave type not found"

    async def test_inactive_employee(self, db, annual_leave):
        gone = await make_employee(db, is_active=False)
        with pytest.raises(NotFoundException) as exc:
            await LeaveService.validate_and_create_request(
                db, gone.id, _apply(annual_leave.id, future_monday()),
            )
        assert exc.value.detail == "Employee not found or inactive"

    # ── Half-day shape ──────────────────────────────────────────────

    async def test_half_day_must_be_single_date(self, db, employee, annual_leave):
        monday = future_monday()
        with pytest.raises(ValidationException) as exc:
            await LeaveService.validate_and_create_request(
                db, employee.id,
                _apply(
                    annual_leave.id, monday, monday + timedelta(days=1),
                    is_half_day=True, half_day_session=HalfDaySession.PM,
                ),
            )
        assert exc.value.detail == "Half-day leave must start and end on the same date"

    async def test_half_day_on_weekend(self, db, employee, annual_leave):
        with pytest.raises(ValidationException) as exc:
            await LeaveService.validate_and_create_request(
                db, employee.id,
                _apply(
                    annual_leave.id, future_saturday(),
                    is_half_day=True, half_day_session=HalfDaySession.AM,
                ),
            )
        assert exc.value.detail == "Half-day leave must be on a working day (Mon-Fri)"

    async def test_half_day_on_holiday(self, db, employee, annual_leave):
        monday = future_monday()
        await make_holiday(db, monday)
        with pytest.raises(ValidationException) as exc:
            await LeaveService.validate_and_create_request(
                db, employee.id,
                _apply(annual_leave.id, monday, is_half_day=True, half_day_session=HalfDaySession.AM),
            )
        assert exc.value.detail == "Half-day leave cannot be on a public holiday"

    async def test_half_day_needs_session(self, db, employee, annual_leave):
        with pytest.raises(ValidationException) as exc:
            await LeaveService.validate_and_create_request(
                db, employee.id, _apply(annual_leave.id, future_monday(), is_half_day=True),
            )
        assert exc.value.detail == "Half-day session (AM or PM) is required"

    # ── Overlap ─────────────────────────────────────────────────────

    @pytest.mark.parametrize("status", [LeaveStatus.pending, LeaveStatus.approved])
    async def test_overlap_with_active_request(self, db, employee, annual_leave, status):
        await make_balance(db, employee, annual_leave)
        monday = future_monday()
        await make_request(
            db, employee, annual_leave,
            start=monday + timedelta(days=2), end=monday + timedelta(days=3), status=status,
        )

        with pytest.raises(ValidationException) as exc:
            await LeaveService.validate_and_create_request(
                db, employee.id, _apply(annual_leave.id, monday, monday + timedelta(days=2)),
            )
        assert exc.value.detail == "You have overlapping leave requests for these dates"

    @pytest.mark.parametrize("status", [LeaveStatus.rejected, LeaveStatus.cancelled])
    async def test_closed_requests_do_not_block(self, db, employee, annual_leave, status):
        await make_balance(db, employee, annual_leave)
        monday = future_monday()
        await make_request(db, employee, annual_leave, start=monday, status=status)

        out = await LeaveService.validate_and_create_request(
            db, employee.id, _apply(annual_leave.id, monday),
        )
        assert out.status == LeaveStatus.pending

    # ── Day count ───────────────────────────────────────────────────

    async def test_weekend_only_range_rejected(self, db, employee, annual_leave):
        await make_balance(db, employee, annual_leave)
        saturday = future_saturday()

        with pytest.raises(ValidationException) as exc:
            await LeaveService.validate_and_create_request(
                db, employee.id, _apply(annual_leave.id, saturday, saturday + timedelta(days=1)),
            )
        assert exc.value.detail == "Invalid date range or no working days selected"

    # ── Category gating ─────────────────────────────────────────────

    async def test_male_employee_cannot_take_maternity(self, db, employee):
        maternity = await make_leave_type(
            db, name="Maternity Leave", default_days=180, category=LeaveCategory.maternity,
        )
        await make_balance(db, employee, maternity, total="180")

        with pytest.raises(ValidationException) as exc:
            await LeaveService.validate_and_create_request(
                db, employee.id, _apply(maternity.id, future_monday()),
            )
        assert exc.value.detail == "Maternity leave is available only to female employees"

    async def test_gender_checked_before_missing_balance(self, db, employee):
        maternity = await make_leave_type(
            db, name="Maternity Leave", default_days=180, category=LeaveCategory.maternity,
        )

        with pytest.raises(ValidationException) as exc:
            await LeaveService.validate_and_create_request(
                db, employee.id, _apply(maternity.id, future_monday()),
            )
        assert exc.value.detail == "Maternity leave is available only to female employees"

    async def test_female_employee_cannot_take_paternity(self, db):
        emp = await make_employee(db, gender=GenderType.female)
        paternity = await make_leave_type(
            db, name="Paternity Leave", default_days=15, category=LeaveCategory.paternity,
        )
        await make_balance(db, emp, paternity, total="15")

        with pytest.raises(ValidationException) as exc:
            await LeaveService.validate_and_create_request(
                db, emp.id, _apply(paternity.id, future_monday()),
            )
        assert exc.value.detail == "Paternity leave is available only to male employees"

    async def test_maternity_half_day_rejected(self, db):
        emp = await make_employee(db, gender=GenderType.female)
        maternity = await make_leave_type(
            db, name="Maternity Leave", default_days=180, category=LeaveCategory.maternity,
        )
        await make_balance(db, emp, maternity, total="180")

        with pytest.raises(ValidationException) as exc:
            await LeaveService.validate_and_create_request(
                db, emp.id,
                _apply(maternity.id, future_monday(), is_half_day=True, half_day_session=HalfDaySession.PM),
            )
        assert exc.value.detail == "Half-day is not allowed for Maternity/Paternity leave"

    # ── Balance ─────────────────────────────────────────────────────

    async def test_missing_balance_rejected(self, db, employee, annual_leave):
        with pytest.raises(ValidationException) as exc:
            await LeaveService.validate_and_create_request(
                db, employee.id, _apply(annual_leave.id, future_monday()),
            )
        assert exc.value.detail == "Leave balance not found for this leave type"

    async def test_insufficient_balance_rejected(self, db, employee):
        casual = await make_leave_type(db, name="Casual Leave", default_days=8)
        await make_balance(db, employee, casual, total="8", used="6")
        monday = future_monday()

        with pytest.raises(ValidationException) as exc:
            await LeaveService.validate_and_create_request(
                db, employee.id, _apply(casual.id, monday, monday + timedelta(days=2)),
            )
        assert exc.value.detail == (
            "Insufficient leave balance. You have 2 days remaining for Casual Leave"
        )

    async def test_unpaid_type_skips_balance(self, db, employee):
        unpaid = await make_leave_type(
            db, name="Unpaid Leave", default_days=0, category=LeaveCategory.unpaid,
        )
        monday = future_monday()

        out = await LeaveService.validate_and_create_request(
            db, employee.id, _apply(unpaid.id, monday, monday + timedelta(days=4)),
        )
        assert out.total_days == Decimal("5")

    async def test_first_failing_check_wins(self, db, employee, annual_leave):
        """A half-day weekend request with no balance reports the half-day rule."""
        with pytest.raises(ValidationException) as exc:
            await LeaveService.validate_and_create_request(
                db, employee.id,
                _apply(annual_leave.id, future_saturday(), is_half_day=True,
                       half_day_session=HalfDaySession.AM),
            )
        assert exc.value.detail == "Half-day leave must be on a working day (Mon-Fri)"


# ═════════════════════════════════════════════════════════════════════
# Lifecycle
# ═════════════════════════════════════════════════════════════════════


class TestTransitions:

    async def test_approve_debits_balance_once(self, db, employee, hr_user, annual_leave):
        bal = await make_balance(db, employee, annual_leave, total="24", used="0")
        req = await make_request(
            db, employee, annual_leave,
            start=future_monday(), end=future_monday() + timedelta(days=2), days="3",
        )

        out = await LeaveService.transition_request(db, req.id, LeaveStatus.approved, hr_user)
        assert out.status == LeaveStatus.approved
        assert out.approved_by == hr_user.id
        assert out.approver.name == "Alice Brown"
        assert out.approved_at is not None

        await db.refresh(bal)
        assert bal.used_days == Decimal("3")

        with pytest.raises(AlreadyProcessedException) as exc:
            await LeaveService.transition_request(db, req.id, LeaveStatus.approved, hr_user)
        assert exc.value.detail == "Leave request is already approved"

        await db.refresh(bal)
        assert bal.used_days == Decimal("3")

    async def test_approve_rechecks_balance(self, db, employee, hr_user):
        casual = await make_leave_type(db, name="Casual Leave", default_days=8)
        await make_balance(db, employee, casual, total="3", used="0")
        monday = future_monday()
        first = await make_request(db, employee, casual, start=monday, end=monday + timedelta(days=1), days="2")
        second = await make_request(
            db, employee, casual,
            start=monday + timedelta(days=7), end=monday + timedelta(days=8), days="2",
        )

        await LeaveService.transition_request(db, first.id, LeaveStatus.approved, hr_user)
        with pytest.raises(ValidationException) as exc:
            await LeaveService.transition_request(db, second.id, LeaveStatus.approved, hr_user)
        assert "Insufficient leave balance" in exc.value.detail

    async def test_reject_requires_reason(self, db, employee, hr_user, annual_leave):
        req = await make_request(db, employee, annual_leave, start=future_monday())

        with pytest.raises(ValidationException) as exc:
            await LeaveService.transition_request(db, req.id, LeaveStatus.rejected, hr_user)
        assert exc.value.detail == "Rejection reason is required when rejecting a leave request"

    async def test_short_rejection_reason_keeps_pending(self, db, employee, hr_user, annual_leave):
        req = await make_request(db, employee, annual_leave, start=future_monday())

        with pytest.raises(ValidationException) as exc:
            await LeaveService.transition_request(
                db, req.id, LeaveStatus.rejected, hr_user, reason="No go",
            )
        assert exc.value.detail == "Rejection reason must be at least 10 characters"

        out = await LeaveService.get_request(db, req.id, hr_user)
        assert out.status == LeaveStatus.pending

    async def test_reject_records_reason_without_debit(self, db, employee, hr_user, annual_leave):
        bal = await make_balance(db, employee, annual_leave)
        req = await make_request(db, employee, annual_leave, start=future_monday())

        out = await LeaveService.transition_request(
            db, req.id, LeaveStatus.rejected, hr_user, reason="Team is short-staffed that week",
        )
        assert out.status == LeaveStatus.rejected
        assert out.rejection_reason == "Team is short-staffed that week"

        await db.refresh(bal)
        assert bal.used_days == Decimal("0")

    async def test_employee_cannot_approve(self, db, employee, annual_leave):
        colleague = await make_employee(db, name="Bob Johnson")
        req = await make_request(db, colleague, annual_leave, start=future_monday())

        with pytest.raises(ForbiddenException) as exc:
            await LeaveService.transition_request(db, req.id, LeaveStatus.approved, employee)
        assert exc.value.detail == "Only HR can approve or reject leave requests"

    async def test_owner_cancels_pending(self, db, employee, annual_leave):
        req = await make_request(db, employee, annual_leave, start=future_monday())

        out = await LeaveService.cancel_request(db, req.id, employee)
        assert out.status == LeaveStatus.cancelled
        assert out.cancelled_at is not None

    async def test_cannot_cancel_someone_elses(self, db, employee, annual_leave):
        colleague = await make_employee(db, name="Bob Johnson")
        req = await make_request(db, colleague, annual_leave, start=future_monday())

        with pytest.raises(ForbiddenException) as exc:
            await LeaveService.cancel_request(db, req.id, employee)
        assert exc.value.detail == "You can only cancel your own leave requests"

    async def test_hr_can_cancel_any(self, db, employee, hr_user, annual_leave):
        req = await make_request(db, employee, annual_leave, start=future_monday())
        out = await LeaveService.cancel_request(db, req.id, hr_user)
        assert out.status == LeaveStatus.cancelled

    async def test_cannot_cancel_approved(self, db, employee, annual_leave):
        req = await make_request(
            db, employee, annual_leave, start=future_monday(), status=LeaveStatus.approved,
        )
        with pytest.raises(AlreadyProcessedException) as exc:
            await LeaveService.cancel_request(db, req.id, employee)
        assert exc.value.detail == "Cannot cancel approved leave request"

    async def test_unknown_request(self, db, hr_user):
        with pytest.raises(NotFoundException) as exc:
            await LeaveService.transition_request(db, uuid.uuid4(), LeaveStatus.approved, hr_user)
        assert exc.value.detail == "Leave request not found"


# ═════════════════════════════════════════════════════════════════════
# Listings
# ═════════════════════════════════════════════════════════════════════


class TestListings:

    async def test_employee_sees_only_own(self, db, employee, hr_user, annual_leave):
        colleague = await make_employee(db, name="Bob Johnson")
        await make_request(db, employee, annual_leave, start=future_monday())
        await make_request(db, colleague, annual_leave, start=future_monday())

        mine = await LeaveService.list_requests(
            db, employee, PAGE, employee_id=colleague.id,
        )
        assert mine.meta.total == 1
        assert mine.data[0].employee_id == employee.id

        everyone = await LeaveService.list_requests(db, hr_user, PAGE)
        assert everyone.meta.total == 2

    async def test_status_filter(self, db, employee, hr_user, annual_leave):
        monday = future_monday()
        await make_request(db, employee, annual_leave, start=monday)
        await make_request(
            db, employee, annual_leave, start=monday + timedelta(days=7), status=LeaveStatus.approved,
        )

        page = await LeaveService.list_requests(
            db, hr_user, PAGE, status=LeaveStatus.approved,
        )
        assert page.meta.total == 1
        assert page.data[0].status == LeaveStatus.approved

    async def test_get_someone_elses_forbidden(self, db, employee, annual_leave):
        colleague = await make_employee(db, name="Bob Johnson")
        req = await make_request(db, colleague, annual_leave, start=future_monday())

        with pytest.raises(ForbiddenException) as exc:
            await LeaveService.get_request(db, req.id, employee)
        assert exc.value.detail == "You can only view your own leave requests"


# ═════════════════════════════════════════════════════════════════════
# HTTP endpoints
# ═════════════════════════════════════════════════════════════════════


class TestLeaveEndpoints:

    async def test_apply_and_approve_flow(self, client, db, employee, hr_user, annual_leave,
                                          auth_headers, hr_headers):
        await make_balance(db, employee, annual_leave, total="24")
        monday = future_monday()

        resp = await client.post(
            "/api/v1/leaves",
            json={
                "leave_type_id": str(annual_leave.id),
                "start_date": monday.isoformat(),
                "end_date": (monday + timedelta(days=1)).isoformat(),
                "reason": REASON,
            },
            headers=auth_headers,
        )
        assert resp.status_code == 201
        created = resp.json()
        assert created["status"] == "pending"
        assert Decimal(created["total_days"]) == Decimal("2")

        resp = await client.patch(
            f"/api/v1/leaves/{created['id']}/status",
            json={"status": "approved"},
            headers=hr_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "approved"

        resp = await client.get("/api/v1/leaves/balances", headers=auth_headers)
        assert resp.status_code == 200
        balance = resp.json()[0]
        assert Decimal(balance["used_days"]) == Decimal("2")
        assert Decimal(balance["remaining_days"]) == Decimal("22")

    async def test_validation_failure_is_problem_json(self, client, auth_headers, annual_leave):
        saturday = future_saturday()
        resp = await client.post(
            "/api/v1/leaves",
            json={
                "leave_type_id": str(annual_leave.id),
                "start_date": saturday.isoformat(),
                "end_date": (saturday + timedelta(days=1)).isoformat(),
                "reason": REASON,
            },
            headers=auth_headers,
        )
        assert resp.status_code == 422
        assert resp.headers["content-type"].startswith("application/problem+json")
        assert resp.json()["detail"] == "Invalid date range or no working days selected"
        assert resp.json()["errors"] == {
            "date_range": ["Invalid date range or no working days selected"],
        }

    async def test_short_reason_rejected_by_schema(self, client, auth_headers, annual_leave):
        resp = await client.post(
            "/api/v1/leaves",
            json={
                "leave_type_id": str(annual_leave.id),
                "start_date": future_monday().isoformat(),
                "end_date": future_monday().isoformat(),
                "reason": "short",
            },
            headers=auth_headers,
        )
        assert resp.status_code == 422
        assert "reason" in resp.json()["errors"]

    async def test_employee_cannot_decide(self, client, db, employee, annual_leave, auth_headers):
        req = await make_request(db, employee, annual_leave, start=future_monday())
        resp = await client.patch(
            f"/api/v1/leaves/{req.id}/status",
            json={"status": "approved"},
            headers=auth_headers,
        )
        assert resp.status_code == 403

    async def test_status_endpoint_refuses_cancelled(self, client, db, employee, annual_leave, hr_headers):
        req = await make_request(db, employee, annual_leave, start=future_monday())
        resp = await client.patch(
            f"/api/v1/leaves/{req.id}/status",
            json={"status": "cancelled"},
            headers=hr_headers,
        )
        assert resp.status_code == 422
        assert resp.json()["detail"] == "Status must be either approved or rejected"

    async def test_cancel_endpoint(self, client, db, employee, annual_leave, auth_headers):
        req = await make_request(db, employee, annual_leave, start=future_monday())
        resp = await client.patch(f"/api/v1/leaves/{req.id}/cancel", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["status"] == "cancelled"

        again = await client.patch(f"/api/v1/leaves/{req.id}/cancel", headers=auth_headers)
        assert again.status_code == 409

    async def test_working_days_preview(self, client, db, auth_headers):
        monday = future_monday()
        await make_holiday(db, monday + timedelta(days=1))
        resp = await client.get(
            "/api/v1/leaves/working-days",
            params={
                "start_date": monday.isoformat(),
                "end_date": (monday + timedelta(days=6)).isoformat(),
            },
            headers=auth_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["working_days"] == 4

    async def test_working_days_inverted_range(self, client, auth_headers):
        monday = future_monday()
        resp = await client.get(
            "/api/v1/leaves/working-days",
            params={
                "start_date": monday.isoformat(),
                "end_date": (monday - timedelta(days=3)).isoformat(),
            },
            headers=auth_headers,
        )
        assert resp.status_code == 422
        assert resp.json()["detail"] == "Start date cannot be after end date"

    async def test_calendar_day_on_holiday(self, client, db, auth_headers):
        await make_holiday(db, date(2025, 4, 18), name="Good Friday")
        resp = await client.get(
            "/api/v1/leaves/calendar-day", params={"day": "2025-04-18"}, headers=auth_headers,
        )
        assert resp.status_code == 200
        assert resp.json() == {
            "day": "2025-04-18",
            "is_weekend": False,
            "is_public_holiday": True,
            "is_working_day": False,
            "next_working_day": "2025-04-21",
            "previous_working_day": "2025-04-17",
            "fiscal_year": 2025,
        }

    async def test_calendar_day_on_weekend(self, client, auth_headers):
        resp = await client.get(
            "/api/v1/leaves/calendar-day", params={"day": "2025-03-29"}, headers=auth_headers,
        )
        body = resp.json()
        assert body["is_weekend"] is True
        assert body["is_working_day"] is False
        assert body["next_working_day"] == "2025-03-31"
        assert body["previous_working_day"] == "2025-03-28"
        assert body["fiscal_year"] == 2024

    async def test_list_requires_auth(self, client):
        resp = await client.get("/api/v1/leaves")
        assert resp.status_code == 401

    async def test_stats_scoped_to_employee(self, client, db, employee, annual_leave, auth_headers):
        colleague = await make_employee(db, name="Bob Johnson")
        year = calendar.current_year()
        await make_request(db, employee, annual_leave, start=date(year, 12, 1), days="1")
        await make_request(
            db, colleague, annual_leave, start=date(year, 12, 1), days="3",
            status=LeaveStatus.approved,
        )

        resp = await client.get("/api/v1/leaves/stats/overview", headers=auth_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["year"] == year
        assert [s["status"] for s in body["status_breakdown"]] == ["pending"]
        assert body["leave_type_breakdown"][0]["count"] == 1

    async def test_hr_reads_any_request(self, client, db, employee, annual_leave, hr_headers):
        req = await make_request(db, employee, annual_leave, start=future_monday())
        resp = await client.get(f"/api/v1/leaves/{req.id}", headers=hr_headers)
        assert resp.status_code == 200
        assert resp.json()["employee"]["name"] == "John Doe"

    async def test_other_employee_token_forbidden(self, client, db, employee, annual_leave):
        colleague = await make_employee(db, name="Bob Johnson")
        req = await make_request(db, employee, annual_leave, start=future_monday())
        headers = await auth_headers_for(db, colleague)

        resp = await client.get(f"/api/v1/leaves/{req.id}", headers=headers)
        assert resp.status_code == 403
