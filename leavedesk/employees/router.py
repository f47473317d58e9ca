"""Employees router — directory, profile, HR management and balances.

Routes:
    /employees                      — List (HR), create (HR)
    /employees/departments          — Distinct departments
    /employees/{id}                 — Get (own or HR), update (own or HR), deactivate (HR)
    /employees/{id}/leave-balances  — Current-year balances (own or HR)
"""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import get_current_user, require_permission
from leavedesk.common.constants import UserRole
from leavedesk.common.pagination import PaginatedResponse, PaginationParams
from leavedesk.database import get_db
from leavedesk.employees.models import Employee
from leavedesk.employees.schemas import (
    EmployeeCreate,
    EmployeeListItem,
    EmployeeOut,
    EmployeeUpdate,
)
from leavedesk.employees.service import EmployeeService
from leavedesk.leave.calendar import current_year
from leavedesk.leave.schemas import LeaveBalanceOut

router = APIRouter(prefix="", tags=["employees"])


# ── GET /employees ──────────────────────────────────────────────────

@router.get("", response_model=PaginatedResponse[EmployeeListItem])
async def list_employees(
    search: Optional[str] = Query(None, description="Search by name, email, or employee code"),
    department: Optional[str] = Query(None),
    role: Optional[UserRole] = Query(None),
    is_active: Optional[bool] = Query(None),
    pagination: PaginationParams = Depends(),
    current_user: Employee = Depends(require_permission("employee:read_all")),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.list_employees(
        db,
        pagination,
        search=search,
        department=department,
        role=role,
        is_active=is_active,
    )


# ── GET /employees/departments ──────────────────────────────────────

@router.get("/departments", response_model=list[str])
async def list_departments(
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.list_departments(db)


# ── GET /employees/{id} ─────────────────────────────────────────────

@router.get("/{employee_id}", response_model=EmployeeOut)
async def get_employee(
    employee_id: uuid.UUID,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.get_employee(db, employee_id, current_user)


# ── POST /employees ─────────────────────────────────────────────────

@router.post("", response_model=EmployeeOut, status_code=status.HTTP_201_CREATED)
async def create_employee(
    body: EmployeeCreate,
    current_user: Employee = Depends(require_permission("employee:create")),
    db: AsyncSession = Depends(get_db),
):
    """Create an employee; the code and this year's balances are generated."""
    return await EmployeeService.create_employee(db, body, actor_id=current_user.id)


# ── PUT /employees/{id} ─────────────────────────────────────────────

@router.put("/{employee_id}", response_model=EmployeeOut)
async def update_employee(
    employee_id: uuid.UUID,
    body: EmployeeUpdate,
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.update_employee(db, employee_id, body, current_user)


# ── DELETE /employees/{id} ──────────────────────────────────────────

@router.delete("/{employee_id}")
async def deactivate_employee(
    employee_id: uuid.UUID,
    current_user: Employee = Depends(require_permission("employee:deactivate")),
    db: AsyncSession = Depends(get_db),
):
    employee = await EmployeeService.deactivate_employee(
        db, employee_id, actor_id=current_user.id,
    )
    return {"message": f"Employee {employee.name} deactivated successfully"}


# ── GET /employees/{id}/leave-balances ──────────────────────────────

@router.get("/{employee_id}/leave-balances", response_model=list[LeaveBalanceOut])
async def get_leave_balances(
    employee_id: uuid.UUID,
    year: Optional[int] = Query(None, description="Leave year; defaults to current year"),
    current_user: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.get_balances(
        db, employee_id, current_user, year=year or current_year(),
    )
