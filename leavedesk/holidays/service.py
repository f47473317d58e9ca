"""Holiday service — CRUD, soft delete and bulk import of public holidays."""

from __future__ import annotations

import datetime as dt
import logging
import uuid
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.audit import create_audit_entry
from leavedesk.common.exceptions import ConflictError, NotFoundException, ValidationException
from leavedesk.holidays.models import PublicHoliday
from leavedesk.holidays.schemas import (
    DESCRIPTION_MAX_LENGTH,
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    BulkHolidayItem,
    BulkImportError,
    BulkImportResult,
    HolidayCreate,
    HolidayOut,
    HolidayUpdate,
)

logger = logging.getLogger(__name__)


class HolidayService:
    """Async operations on the public-holiday calendar."""

    # ── Helpers ─────────────────────────────────────────────────────

    @staticmethod
    async def _get(db: AsyncSession, holiday_id: uuid.UUID) -> PublicHoliday:
        result = await db.execute(
            select(PublicHoliday)
            .where(PublicHoliday.id == holiday_id)
            .execution_options(populate_existing=True)
        )
        holiday = result.scalars().first()
        if holiday is None:
            raise NotFoundException("PublicHoliday", str(holiday_id), detail="Holiday not found")
        return holiday

    @staticmethod
    async def _date_taken(
        db: AsyncSession,
        day: dt.date,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> bool:
        # Inactive rows still hold the unique date
        query = select(PublicHoliday.id).where(PublicHoliday.date == day)
        if exclude_id is not None:
            query = query.where(PublicHoliday.id != exclude_id)
        return (await db.execute(query)).first() is not None

    # ── Read ────────────────────────────────────────────────────────

    @staticmethod
    async def list_holidays(
        db: AsyncSession,
        year: Optional[int] = None,
    ) -> list[HolidayOut]:
        """Active holidays ordered by date, optionally limited to one year."""
        query = select(PublicHoliday).where(PublicHoliday.is_active.is_(True))
        if year is not None:
            query = query.where(
                PublicHoliday.date >= dt.date(year, 1, 1),
                PublicHoliday.date <= dt.date(year, 12, 31),
            )
        result = await db.execute(query.order_by(PublicHoliday.date))
        return [HolidayOut.model_validate(h) for h in result.scalars().all()]

    @staticmethod
    async def get_holiday(db: AsyncSession, holiday_id: uuid.UUID) -> HolidayOut:
        return HolidayOut.model_validate(await HolidayService._get(db, holiday_id))

    # ── Write ───────────────────────────────────────────────────────

    @staticmethod
    async def create_holiday(
        db: AsyncSession,
        data: HolidayCreate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> HolidayOut:
        if await HolidayService._date_taken(db, data.date):
            raise ConflictError(
                "date", data.date.isoformat(), detail="A holiday already exists on this date",
            )

        holiday = PublicHoliday(
            name=data.name.strip(),
            date=data.date,
            description=data.description or "",
        )
        db.add(holiday)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="public_holiday",
            entity_id=holiday.id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json"),
        )
        logger.info("Created holiday %s on %s", holiday.name, holiday.date)

        await db.refresh(holiday)
        return HolidayOut.model_validate(holiday)

    @staticmethod
    async def update_holiday(
        db: AsyncSession,
        holiday_id: uuid.UUID,
        data: HolidayUpdate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> HolidayOut:
        holiday = await HolidayService._get(db, holiday_id)

        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        if not changes:
            raise ValidationException.single("body", "No fields to update")

        if "date" in changes and await HolidayService._date_taken(
            db, changes["date"], exclude_id=holiday.id,
        ):
            raise ConflictError(
                "date", changes["date"].isoformat(),
                detail="A holiday already exists on this date",
            )

        old_values: dict[str, Any] = {}
        for field, value in changes.items():
            old_values[field] = _jsonable(getattr(holiday, field))
            setattr(holiday, field, value)

        await db.flush()
        await create_audit_entry(
            db,
            action="update",
            entity_type="public_holiday",
            entity_id=holiday.id,
            actor_id=actor_id,
            old_values=old_values,
            new_values={k: _jsonable(v) for k, v in changes.items()},
        )

        await db.refresh(holiday)
        return HolidayOut.model_validate(holiday)

    @staticmethod
    async def delete_holiday(
        db: AsyncSession,
        holiday_id: uuid.UUID,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> PublicHoliday:
        """Soft delete; the date stops counting as a holiday."""
        holiday = await HolidayService._get(db, holiday_id)
        holiday.is_active = False
        await db.flush()

        await create_audit_entry(
            db,
            action="deactivate",
            entity_type="public_holiday",
            entity_id=holiday.id,
            actor_id=actor_id,
            old_values={"is_active": True},
            new_values={"is_active": False},
        )
        logger.info("Deactivated holiday %s on %s", holiday.name, holiday.date)
        return holiday

    # ── Bulk import ─────────────────────────────────────────────────

    @staticmethod
    async def bulk_import(
        db: AsyncSession,
        items: list[BulkHolidayItem],
        *,
        actor_id: uuid.UUID,
    ) -> BulkImportResult:
        """Create each item independently; failures are reported per item."""
        if not items:
            raise ValidationException.single(
                "holidays", "Holidays array is required and cannot be empty",
            )

        created: list[PublicHoliday] = []
        errors: list[BulkImportError] = []

        for item in items:
            raw = item.model_dump(exclude_none=True)
            name = (item.name or "").strip()
            if not name or not item.date:
                errors.append(BulkImportError(holiday=raw, error="Name and date are required"))
                continue
            if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
                errors.append(BulkImportError(
                    holiday=raw,
                    error=f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters",
                ))
                continue
            if item.description and len(item.description) > DESCRIPTION_MAX_LENGTH:
                errors.append(BulkImportError(
                    holiday=raw,
                    error=f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters",
                ))
                continue
            try:
                day = dt.date.fromisoformat(item.date)
            except ValueError:
                errors.append(BulkImportError(holiday=raw, error="Invalid date format"))
                continue
            if await HolidayService._date_taken(db, day):
                errors.append(
                    BulkImportError(holiday=raw, error="Holiday already exists on this date"),
                )
                continue

            holiday = PublicHoliday(
                name=name, date=day, description=item.description or "",
            )
            db.add(holiday)
            await db.flush()
            created.append(holiday)

        for holiday in created:
            await db.refresh(holiday)

        await create_audit_entry(
            db,
            action="bulk_import",
            entity_type="public_holiday",
            entity_id=actor_id,
            actor_id=actor_id,
            new_values={
                "created": [h.date.isoformat() for h in created],
                "failed": len(errors),
            },
        )
        logger.info("Holiday bulk import: %d created, %d failed", len(created), len(errors))

        return BulkImportResult(
            message=(
                f"Bulk import completed. {len(created)} created, {len(errors)} failed."
            ),
            created=[HolidayOut.model_validate(h) for h in created],
            errors=errors,
        )


def _jsonable(value: Any) -> Any:
    if isinstance(value, dt.date):
        return value.isoformat()
    return value
