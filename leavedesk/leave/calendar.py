"""Holiday/calendar lookup and the working-day calculator.

Working days are Monday–Friday minus active public holidays. The pure
helpers take the holiday set explicitly; the ``async`` ones read it from
the ``public_holidays`` table.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.exceptions import InvalidRangeException
from leavedesk.config import settings
from leavedesk.holidays.models import PublicHoliday

# date.weekday(): Saturday = 5, Sunday = 6
WEEKEND_DAYS: frozenset[int] = frozenset({5, 6})


def today() -> date:
    """Current date in the organisation's timezone."""
    return datetime.now(ZoneInfo(settings.TIMEZONE)).date()


def current_year() -> int:
    return today().year


def fiscal_year(d: date | None = None) -> int:
    """April–March fiscal year that *d* (default today) falls in."""
    d = d or today()
    return d.year if d.month >= 4 else d.year - 1


# ── Pure lookups ────────────────────────────────────────────────────

def is_weekday(d: date) -> bool:
    return d.weekday() not in WEEKEND_DAYS


def next_working_day(d: date) -> date:
    """First weekday strictly after *d* (holidays are not skipped)."""
    nxt = d + timedelta(days=1)
    while not is_weekday(nxt):
        nxt += timedelta(days=1)
    return nxt


def previous_working_day(d: date) -> date:
    """Last weekday strictly before *d* (holidays are not skipped)."""
    prev = d - timedelta(days=1)
    while not is_weekday(prev):
        prev -= timedelta(days=1)
    return prev


def count_working_days(start: date, end: date, holidays: Iterable[date] = ()) -> int:
    """Weekdays in the inclusive range minus *holidays* falling on a weekday.

    Raises:
        InvalidRangeException: if *start* is after *end*.
    """
    if start > end:
        raise InvalidRangeException("Start date cannot be after end date")

    holiday_set = set(holidays)
    days = 0
    current = start
    while current <= end:
        if is_weekday(current) and current not in holiday_set:
            days += 1
        current += timedelta(days=1)
    return max(0, days)


# ── Database-backed lookups ─────────────────────────────────────────

async def get_holiday_dates(db: AsyncSession, start: date, end: date) -> set[date]:
    """Active public-holiday dates within [start, end]."""
    result = await db.execute(
        select(PublicHoliday.date).where(
            PublicHoliday.is_active.is_(True),
            PublicHoliday.date >= start,
            PublicHoliday.date <= end,
        )
    )
    return set(result.scalars().all())


async def is_public_holiday(db: AsyncSession, d: date) -> bool:
    result = await db.execute(
        select(PublicHoliday.id).where(
            PublicHoliday.date == d,
            PublicHoliday.is_active.is_(True),
        )
    )
    return result.first() is not None


async def is_working_day(db: AsyncSession, d: date) -> bool:
    """Weekday that is not an active public holiday."""
    return is_weekday(d) and not await is_public_holiday(db, d)


async def compute_working_days(db: AsyncSession, start: date, end: date) -> int:
    """Working days in the inclusive range [start, end]."""
    if start > end:
        raise InvalidRangeException("Start date cannot be after end date")
    holidays = await get_holiday_dates(db, start, end)
    return count_working_days(start, end, holidays)
