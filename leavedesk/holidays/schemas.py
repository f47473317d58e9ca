"""Holiday Pydantic schemas."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


class HolidayCreate(BaseModel):
    name: str = Field(..., min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    date: dt.date
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)


class HolidayUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    date: Optional[dt.date] = None
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    is_active: Optional[bool] = None


class HolidayOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    date: dt.date
    description: Optional[str] = None
    is_active: bool
    created_at: Optional[dt.datetime] = None


class HolidayYearOut(BaseModel):
    year: int
    holidays: list[HolidayOut]


# ── Bulk import ─────────────────────────────────────────────────────

class BulkHolidayItem(BaseModel):
    """Loosely typed so one bad row is reported instead of failing the batch."""

    name: Optional[str] = None
    date: Optional[str] = None
    description: Optional[str] = None


class BulkHolidayImport(BaseModel):
    holidays: list[BulkHolidayItem]


class BulkImportError(BaseModel):
    holiday: dict[str, Any]
    error: str


class BulkImportResult(BaseModel):
    message: str
    created: list[HolidayOut]
    errors: list[BulkImportError]
