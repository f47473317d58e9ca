"""Holidays router — public calendar reads, HR-managed writes."""


import uuid

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import require_permission
from leavedesk.database import get_db
from leavedesk.employees.models import Employee
from leavedesk.holidays.schemas import (
    BulkHolidayImport,
    BulkImportResult,
    HolidayCreate,
    HolidayOut,
    HolidayUpdate,
    HolidayYearOut,
)
from leavedesk.holidays.service import HolidayService

router = APIRouter(prefix="", tags=["holidays"])


# ── GET /holidays ───────────────────────────────────────────────────

@router.get("", response_model=list[HolidayOut])
async def list_holidays(db: AsyncSession = Depends(get_db)):
    """Active holidays ordered by date."""
    return await HolidayService.list_holidays(db)


# ── GET /holidays/year/{year} ───────────────────────────────────────

@router.get("/year/{year}", response_model=HolidayYearOut)
async def holidays_for_year(
    year: int = Path(..., ge=1900, le=2999),
    db: AsyncSession = Depends(get_db),
):
    return HolidayYearOut(year=year, holidays=await HolidayService.list_holidays(db, year))


# ── GET /holidays/{id} ──────────────────────────────────────────────

@router.get("/{holiday_id}", response_model=HolidayOut)
async def get_holiday(holiday_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await HolidayService.get_holiday(db, holiday_id)


# ── POST /holidays ──────────────────────────────────────────────────

@router.post("", response_model=HolidayOut, status_code=status.HTTP_201_CREATED)
async def create_holiday(
    body: HolidayCreate,
    employee: Employee = Depends(require_permission("holiday:manage")),
    db: AsyncSession = Depends(get_db),
):
    return await HolidayService.create_holiday(db, body, actor_id=employee.id)


# ── POST /holidays/bulk-import ──────────────────────────────────────

@router.post("/bulk-import", response_model=BulkImportResult)
async def bulk_import_holidays(
    body: BulkHolidayImport,
    employee: Employee = Depends(require_permission("holiday:manage")),
    db: AsyncSession = Depends(get_db),
):
    return await HolidayService.bulk_import(db, body.holidays, actor_id=employee.id)


# ── PUT /holidays/{id} ──────────────────────────────────────────────

@router.put("/{holiday_id}", response_model=HolidayOut)
async def update_holiday(
    holiday_id: uuid.UUID,
    body: HolidayUpdate,
    employee: Employee = Depends(require_permission("holiday:manage")),
    db: AsyncSession = Depends(get_db),
):
    return await HolidayService.update_holiday(db, holiday_id, body, actor_id=employee.id)


# ── DELETE /holidays/{id} ───────────────────────────────────────────

@router.delete("/{holiday_id}")
async def delete_holiday(
    holiday_id: uuid.UUID,
    employee: Employee = Depends(require_permission("holiday:manage")),
    db: AsyncSession = Depends(get_db),
):
    holiday = await HolidayService.delete_holiday(db, holiday_id, actor_id=employee.id)
    return {"message": f"Holiday {holiday.name} deactivated successfully"}
