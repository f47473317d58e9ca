"""Leave Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Update / *Request  → request bodies (write)
  - *Out                          → response bodies (read)
  - *Brief                        → compact embedded representations
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from leavedesk.common.constants import (
    REASON_MAX_LENGTH,
    REASON_MIN_LENGTH,
    HalfDaySession,
    LeaveCategory,
    LeaveStatus,
)

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


# ═════════════════════════════════════════════════════════════════════
# Embedded / shared
# ═════════════════════════════════════════════════════════════════════


class EmployeeBrief(BaseModel):
    """Minimal employee info embedded in leave responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_code: str
    name: str
    department: str


class LeaveTypeBrief(BaseModel):
    """Minimal leave type info embedded in leave responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    color: str
    category: LeaveCategory


# ═════════════════════════════════════════════════════════════════════
# Leave Type
# ═════════════════════════════════════════════════════════════════════


class LeaveTypeCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    default_days: int = Field(..., ge=0, le=365)
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    description: Optional[str] = Field(None, max_length=500)
    category: LeaveCategory = LeaveCategory.standard


class LeaveTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    default_days: Optional[int] = Field(None, ge=0, le=365)
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    description: Optional[str] = Field(None, max_length=500)
    category: Optional[LeaveCategory] = None
    is_active: Optional[bool] = None


class LeaveTypeOut(BaseModel):
    """Full leave type representation."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    default_days: int
    color: str
    category: LeaveCategory
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ═════════════════════════════════════════════════════════════════════
# Leave Balance
# ═════════════════════════════════════════════════════════════════════


class LeaveBalanceOut(BaseModel):
    """Balance for a single leave type with its remaining days."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    year: int
    total_days: Decimal
    used_days: Decimal
    remaining_days: Decimal
    leave_type: Optional[LeaveTypeBrief] = None


# ═════════════════════════════════════════════════════════════════════
# Leave Request
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestCreate(BaseModel):
    """Body for ``POST /leaves``. ``total_days`` is always computed."""

    leave_type_id: uuid.UUID
    start_date: date
    end_date: date
    is_half_day: bool = False
    half_day_session: Optional[HalfDaySession] = None
    reason: str = Field(..., min_length=REASON_MIN_LENGTH, max_length=REASON_MAX_LENGTH)

    @model_validator(mode="after")
    def _check_range(self) -> "LeaveRequestCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class LeaveStatusUpdate(BaseModel):
    """Body for ``PATCH /leaves/{id}/status`` (HR decision)."""

    status: LeaveStatus
    rejection_reason: Optional[str] = Field(None, max_length=REASON_MAX_LENGTH)


class LeaveRequestOut(BaseModel):
    """Leave request with its employee, type and approver embedded."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    start_date: date
    end_date: date
    total_days: Decimal
    is_half_day: bool
    half_day_session: Optional[HalfDaySession] = None
    reason: str
    status: LeaveStatus
    approved_by: Optional[uuid.UUID] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    employee: Optional[EmployeeBrief] = None
    leave_type: Optional[LeaveTypeBrief] = None
    approver: Optional[EmployeeBrief] = None


# ═════════════════════════════════════════════════════════════════════
# Calendar / stats
# ═════════════════════════════════════════════════════════════════════


class WorkingDaysOut(BaseModel):
    start_date: date
    end_date: date
    working_days: int


class CalendarDayOut(BaseModel):
    """Working-day status of one date, for pickers and half-day checks."""

    day: date
    is_weekend: bool
    is_public_holiday: bool
    is_working_day: bool
    next_working_day: date
    previous_working_day: date
    fiscal_year: int


class StatusBreakdownItem(BaseModel):
    status: LeaveStatus
    count: int = 0
    total_days: Decimal = Decimal("0")


class LeaveTypeBreakdownItem(BaseModel):
    leave_type_id: uuid.UUID
    leave_type_name: str
    leave_type_color: str
    count: int = 0
    total_days: Decimal = Decimal("0")


class LeaveStatsOut(BaseModel):
    """Current-year request statistics (own for employees, org-wide for HR)."""

    year: int
    status_breakdown: list[StatusBreakdownItem] = Field(default_factory=list)
    leave_type_breakdown: list[LeaveTypeBreakdownItem] = Field(default_factory=list)
