"""Employee Pydantic v2 schemas — request/response validation."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from leavedesk.common.constants import GenderType, UserRole


# ── Requests ────────────────────────────────────────────────────────

class EmployeeCreate(BaseModel):
    """Payload for creating an employee (HR). Balances are allocated on create."""

    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    department: str = Field(..., min_length=2, max_length=100)
    joining_date: date
    role: UserRole = UserRole.employee
    gender: Optional[GenderType] = None


class EmployeeUpdate(BaseModel):
    """Partial update. role / is_active / joining_date are HR-only fields."""

    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    department: Optional[str] = Field(None, min_length=2, max_length=100)
    joining_date: Optional[date] = None
    role: Optional[UserRole] = None
    gender: Optional[GenderType] = None
    is_active: Optional[bool] = None


# ── Responses ───────────────────────────────────────────────────────

class EmployeeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_code: str
    name: str
    email: str
    department: str
    role: UserRole
    gender: Optional[GenderType] = None
    joining_date: date
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class EmployeeListItem(BaseModel):
    """Compact row for the employee list."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_code: str
    name: str
    email: str
    department: str
    role: UserRole
    joining_date: date
    is_active: bool
