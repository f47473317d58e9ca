"""Dashboard service — read-only aggregation queries across leave modules.

All methods are static async, following the project convention.
Counts are computed at DB level; the calendar loads its relations eagerly.
"""

from __future__ import annotations

import calendar as month_calendar
from datetime import date
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from leavedesk.common.constants import LeaveStatus, has_permission
from leavedesk.common.exceptions import ValidationException
from leavedesk.dashboard.schemas import (
    CalendarLeaveItem,
    DashboardOverviewResponse,
    TeamCalendarResponse,
)
from leavedesk.employees.models import Employee
from leavedesk.holidays.service import HolidayService
from leavedesk.holidays.schemas import HolidayOut
from leavedesk.leave import calendar
from leavedesk.leave.models import LeaveRequest


class DashboardService:
    """Async dashboard aggregation queries."""

    # ═════════════════════════════════════════════════════════════════
    # GET /overview
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def get_overview(db: AsyncSession) -> DashboardOverviewResponse:
        today = calendar.today()

        employees_q = select(func.count(Employee.id)).where(Employee.is_active.is_(True))
        status_q = (
            select(LeaveRequest.status, func.count(LeaveRequest.id))
            .where(LeaveRequest.status.in_([LeaveStatus.pending, LeaveStatus.approved]))
            .group_by(LeaveRequest.status)
        )
        on_leave_q = select(func.count(func.distinct(LeaveRequest.employee_id))).where(
            LeaveRequest.status == LeaveStatus.approved,
            LeaveRequest.start_date <= today,
            LeaveRequest.end_date >= today,
        )

        employees = (await db.execute(employees_q)).scalar() or 0
        by_status = {
            LeaveStatus(s): n for s, n in (await db.execute(status_q)).all()
        }
        on_leave = (await db.execute(on_leave_q)).scalar() or 0

        return DashboardOverviewResponse(
            employees=employees,
            pending_requests=by_status.get(LeaveStatus.pending, 0),
            approved_requests=by_status.get(LeaveStatus.approved, 0),
            on_leave_today=on_leave,
        )

    # ═════════════════════════════════════════════════════════════════
    # GET /calendar
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def get_team_calendar(
        db: AsyncSession,
        actor: Employee,
        *,
        year: int,
        month: int,
        department: Optional[str] = None,
    ) -> TeamCalendarResponse:
        """Approved and pending leave overlapping the month, plus its holidays.

        Pending requests of other employees are shown to HR only.
        """
        if not 1 <= month <= 12:
            raise ValidationException.single("month", "Month must be between 1 and 12")

        first = date(year, month, 1)
        last = date(year, month, month_calendar.monthrange(year, month)[1])

        query = (
            select(LeaveRequest)
            .join(Employee, LeaveRequest.employee_id == Employee.id)
            .where(
                LeaveRequest.start_date <= last,
                LeaveRequest.end_date >= first,
                LeaveRequest.status.in_([LeaveStatus.approved, LeaveStatus.pending]),
            )
            .options(
                selectinload(LeaveRequest.employee),
                selectinload(LeaveRequest.leave_type),
            )
            .order_by(LeaveRequest.start_date, Employee.name)
        )
        if not has_permission(actor.role, "leave:read_all"):
            query = query.where(
                or_(
                    LeaveRequest.status == LeaveStatus.approved,
                    LeaveRequest.employee_id == actor.id,
                )
            )
        if department:
            query = query.where(Employee.department == department)

        rows = (await db.execute(query)).scalars().all()
        leaves = [
            CalendarLeaveItem(
                id=r.id,
                employee_id=r.employee_id,
                employee_name=r.employee.name,
                department=r.employee.department,
                leave_type=r.leave_type.name,
                color=r.leave_type.color,
                start_date=r.start_date,
                end_date=r.end_date,
                total_days=r.total_days,
                is_half_day=r.is_half_day,
                half_day_session=r.half_day_session,
                status=r.status,
            )
            for r in rows
        ]

        holidays: list[HolidayOut] = [
            h for h in await HolidayService.list_holidays(db, year)
            if first <= h.date <= last
        ]

        return TeamCalendarResponse(
            year=year,
            month=month,
            start_date=first,
            end_date=last,
            leaves=leaves,
            holidays=holidays,
        )
