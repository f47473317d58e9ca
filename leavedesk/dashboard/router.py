"""Dashboard router — HR overview and the team leave calendar."""


from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import get_current_user, require_permission
from leavedesk.dashboard.schemas import DashboardOverviewResponse, TeamCalendarResponse
from leavedesk.dashboard.service import DashboardService
from leavedesk.database import get_db
from leavedesk.employees.models import Employee
from leavedesk.leave.calendar import today

router = APIRouter(prefix="", tags=["dashboard"])


# ── GET /overview ───────────────────────────────────────────────────

@router.get("/overview", response_model=DashboardOverviewResponse)
async def dashboard_overview(
    employee: Employee = Depends(require_permission("dashboard:hr")),
    db: AsyncSession = Depends(get_db),
):
    """Active employees, pending and approved request counts."""
    return await DashboardService.get_overview(db)


# ── GET /calendar ───────────────────────────────────────────────────

@router.get("/calendar", response_model=TeamCalendarResponse)
async def team_calendar(
    year: Optional[int] = Query(None, ge=1900, le=2999, description="Defaults to this year"),
    month: Optional[int] = Query(None, ge=1, le=12, description="Defaults to this month"),
    department: Optional[str] = Query(None),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Who is away in a month, with the month's public holidays."""
    current = today()
    return await DashboardService.get_team_calendar(
        db,
        employee,
        year=year or current.year,
        month=month or current.month,
        department=department,
    )
