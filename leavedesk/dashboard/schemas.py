"""Dashboard Pydantic v2 schemas — response models for dashboard endpoints."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from leavedesk.common.constants import HalfDaySession, LeaveStatus
from leavedesk.holidays.schemas import HolidayOut


# ═════════════════════════════════════════════════════════════════════
# GET /overview
# ═════════════════════════════════════════════════════════════════════


class DashboardOverviewResponse(BaseModel):
    """Top-level KPI cards for the HR dashboard."""

    employees: int = Field(..., description="Active employees count")
    pending_requests: int = Field(..., description="Leave requests with status=pending")
    approved_requests: int = Field(..., description="Leave requests with status=approved")
    on_leave_today: int = Field(0, description="Employees on approved leave today")


# ═════════════════════════════════════════════════════════════════════
# GET /calendar
# ═════════════════════════════════════════════════════════════════════


class CalendarLeaveItem(BaseModel):
    """One leave request as drawn on the team calendar."""

    id: uuid.UUID
    employee_id: uuid.UUID
    employee_name: str
    department: str
    leave_type: str
    color: str
    start_date: date
    end_date: date
    total_days: Decimal
    is_half_day: bool
    half_day_session: Optional[HalfDaySession] = None
    status: LeaveStatus


class TeamCalendarResponse(BaseModel):
    year: int
    month: int
    start_date: date
    end_date: date
    leaves: list[CalendarLeaveItem] = Field(default_factory=list)
    holidays: list[HolidayOut] = Field(default_factory=list)
