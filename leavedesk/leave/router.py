"""Leave routers — requests (apply, decide, cancel, list, stats) and leave types.

All request endpoints require authentication; HR decisions and leave-type
changes are capability-checked. Listing leave types is public.
"""


import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import get_current_user, require_permission
from leavedesk.common.constants import LeaveStatus
from leavedesk.common.pagination import PaginatedResponse, PaginationParams
from leavedesk.database import get_db
from leavedesk.employees.models import Employee
from leavedesk.employees.service import EmployeeService
from leavedesk.leave.calendar import current_year
from leavedesk.leave.schemas import (
    CalendarDayOut,
    LeaveBalanceOut,
    LeaveRequestCreate,
    LeaveRequestOut,
    LeaveStatsOut,
    LeaveStatusUpdate,
    LeaveTypeCreate,
    LeaveTypeOut,
    LeaveTypeUpdate,
    WorkingDaysOut,
)
from leavedesk.leave.service import LeaveService, LeaveTypeService

router = APIRouter(prefix="", tags=["leaves"])
leave_types_router = APIRouter(prefix="", tags=["leave-types"])


# ═════════════════════════════════════════════════════════════════════
# Leave requests
# ═════════════════════════════════════════════════════════════════════


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=PaginatedResponse[LeaveRequestOut])
async def list_leave_requests(
    status: Optional[LeaveStatus] = Query(None),
    start_date: Optional[date] = Query(None, description="Requests starting on/after"),
    end_date: Optional[date] = Query(None, description="Requests ending on/before"),
    employee_id: Optional[uuid.UUID] = Query(None, description="HR only"),
    leave_type_id: Optional[uuid.UUID] = Query(None),
    pagination: PaginationParams = Depends(),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """HR sees all requests; employees see only their own."""
    return await LeaveService.list_requests(
        db,
        employee,
        pagination,
        status=status,
        start_date=start_date,
        end_date=end_date,
        employee_id=employee_id,
        leave_type_id=leave_type_id,
    )


# ── GET /working-days ───────────────────────────────────────────────

@router.get("/working-days", response_model=WorkingDaysOut)
async def working_days(
    start_date: date = Query(...),
    end_date: date = Query(...),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Preview how many working days a date range would consume."""
    days = await LeaveService.compute_working_days(db, start_date, end_date)
    return WorkingDaysOut(start_date=start_date, end_date=end_date, working_days=days)


# ── GET /calendar-day ───────────────────────────────────────────────

@router.get("/calendar-day", response_model=CalendarDayOut)
async def calendar_day(
    day: date = Query(...),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Whether *day* is a working day, and its nearest working neighbours."""
    return await LeaveService.describe_day(db, day)


# ── GET /stats/overview ─────────────────────────────────────────────

@router.get("/stats/overview", response_model=LeaveStatsOut)
async def leave_stats(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.get_stats(db, employee)


# ── GET /balances ───────────────────────────────────────────────────

@router.get("/balances", response_model=list[LeaveBalanceOut])
async def my_balances(
    year: Optional[int] = Query(None, description="Leave year; defaults to current year"),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """The authenticated user's balances."""
    return await EmployeeService.get_balances(
        db, employee.id, employee, year=year or current_year(),
    )


# ── GET /{id} ───────────────────────────────────────────────────────

@router.get("/{request_id}", response_model=LeaveRequestOut)
async def get_leave_request(
    request_id: uuid.UUID,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.get_request(db, request_id, employee)


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", response_model=LeaveRequestOut, status_code=status.HTTP_201_CREATED)
async def apply_leave(
    body: LeaveRequestCreate,
    employee: Employee = Depends(require_permission("leave:request")),
    db: AsyncSession = Depends(get_db),
):
    """Apply for leave. Working days, overlap and balance are checked server-side."""
    return await LeaveService.validate_and_create_request(db, employee.id, body)


# ── PATCH /{id}/status ──────────────────────────────────────────────

@router.patch("/{request_id}/status", response_model=LeaveRequestOut)
async def update_leave_status(
    request_id: uuid.UUID,
    body: LeaveStatusUpdate,
    employee: Employee = Depends(require_permission("leave:approve")),
    db: AsyncSession = Depends(get_db),
):
    """Approve or reject a pending request (HR)."""
    return await LeaveService.update_status(db, request_id, body, employee)


# ── PATCH /{id}/cancel ──────────────────────────────────────────────

@router.patch("/{request_id}/cancel", response_model=LeaveRequestOut)
async def cancel_leave_request(
    request_id: uuid.UUID,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Cancel a pending request (owner or HR)."""
    return await LeaveService.cancel_request(db, request_id, employee)


# ═════════════════════════════════════════════════════════════════════
# Leave types
# ═════════════════════════════════════════════════════════════════════


@leave_types_router.get("", response_model=list[LeaveTypeOut])
async def list_leave_types(db: AsyncSession = Depends(get_db)):
    """Active leave types ordered by name."""
    return await LeaveTypeService.list_leave_types(db)


@leave_types_router.get("/{leave_type_id}", response_model=LeaveTypeOut)
async def get_leave_type(
    leave_type_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    return await LeaveTypeService.get_leave_type(db, leave_type_id)


@leave_types_router.post("", response_model=LeaveTypeOut, status_code=status.HTTP_201_CREATED)
async def create_leave_type(
    body: LeaveTypeCreate,
    employee: Employee = Depends(require_permission("leave_type:manage")),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveTypeService.create_leave_type(db, body, actor_id=employee.id)


@leave_types_router.put("/{leave_type_id}", response_model=LeaveTypeOut)
async def update_leave_type(
    leave_type_id: uuid.UUID,
    body: LeaveTypeUpdate,
    employee: Employee = Depends(require_permission("leave_type:manage")),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveTypeService.update_leave_type(
        db, leave_type_id, body, actor_id=employee.id,
    )


@leave_types_router.delete("/{leave_type_id}")
async def delete_leave_type(
    leave_type_id: uuid.UUID,
    employee: Employee = Depends(require_permission("leave_type:manage")),
    db: AsyncSession = Depends(get_db),
):
    """Soft delete; refused while leave requests reference the type."""
    await LeaveTypeService.delete_leave_type(db, leave_type_id, actor_id=employee.id)
    return {"message": "Leave type deleted successfully"}
