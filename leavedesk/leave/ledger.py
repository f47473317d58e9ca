"""Balance ledger — yearly allotments per (employee, leave type).

``total_days`` is fixed at allocation (pro-rated for mid-year joiners).
``used_days`` only ever grows, and only through ``record_usage`` when a
request is approved.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.exceptions import ValidationException
from leavedesk.config import settings
from leavedesk.leave.models import LeaveBalance, LeaveType

logger = logging.getLogger(__name__)


def prorated_allotment(default_days: int, joining_date: date, year: int) -> int:
    """Allotment for *year* of an employee who joined on *joining_date*.

    Joiners in *year* get ``default × days_remaining / 365`` rounded half-up,
    where days_remaining counts from the joining date to the year's end
    (never negative). Earlier joiners get the full default.
    """
    if joining_date.year != year:
        return default_days

    days_in_year = settings.PRORATION_DAYS_IN_YEAR
    elapsed = (joining_date - date(year, 1, 1)).days
    days_remaining = max(0, days_in_year - elapsed)
    share = Decimal(default_days) * days_remaining / days_in_year
    return int(share.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


async def allocate_balances(
    db: AsyncSession,
    employee_id: uuid.UUID,
    joining_date: date,
    year: int,
) -> list[LeaveBalance]:
    """Create a *year* balance row for every active leave type.

    Types that already have a row for the employee/year are left alone.
    """
    lt_result = await db.execute(
        select(LeaveType).where(LeaveType.is_active.is_(True)).order_by(LeaveType.name)
    )
    existing = set(
        (
            await db.execute(
                select(LeaveBalance.leave_type_id).where(
                    LeaveBalance.employee_id == employee_id,
                    LeaveBalance.year == year,
                )
            )
        ).scalars().all()
    )

    created: list[LeaveBalance] = []
    for leave_type in lt_result.scalars().all():
        if leave_type.id in existing:
            continue
        balance = LeaveBalance(
            employee_id=employee_id,
            leave_type_id=leave_type.id,
            year=year,
            total_days=Decimal(prorated_allotment(leave_type.default_days, joining_date, year)),
            used_days=Decimal("0"),
        )
        db.add(balance)
        created.append(balance)

    await db.flush()
    logger.info(
        "Allocated %d leave balances for employee %s (year %d)",
        len(created), employee_id, year,
    )
    return created


async def get_balance(
    db: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
) -> Optional[LeaveBalance]:
    result = await db.execute(
        select(LeaveBalance).where(
            LeaveBalance.employee_id == employee_id,
            LeaveBalance.leave_type_id == leave_type_id,
            LeaveBalance.year == year,
        )
        # used_days may have moved via record_usage's bulk UPDATE
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def record_usage(
    db: AsyncSession,
    *,
    employee_id: uuid.UUID,
    leave_type: LeaveType,
    year: int,
    days: Decimal,
) -> None:
    """Add *days* to ``used_days`` in a single conditional UPDATE.

    For paid types the UPDATE only matches while ``used + days <= total``,
    so a balance can never be overdrawn even when several pending requests
    were validated against the same remaining days. Unpaid types are
    unconditional; a missing unpaid row is created with a zero allotment.

    Raises:
        ValidationException: paid balance missing or insufficient.
    """
    stmt = (
        update(LeaveBalance)
        .where(
            LeaveBalance.employee_id == employee_id,
            LeaveBalance.leave_type_id == leave_type.id,
            LeaveBalance.year == year,
        )
        .values(used_days=LeaveBalance.used_days + days)
        .execution_options(synchronize_session=False)
    )
    if not leave_type.is_unpaid:
        stmt = stmt.where(LeaveBalance.used_days + days <= LeaveBalance.total_days)

    result = await db.execute(stmt)
    if result.rowcount:
        logger.info(
            "Recorded %s %s day(s) for employee %s (year %d)",
            days, leave_type.name, employee_id, year,
        )
        return

    if leave_type.is_unpaid:
        db.add(
            LeaveBalance(
                employee_id=employee_id,
                leave_type_id=leave_type.id,
                year=year,
                total_days=Decimal("0"),
                used_days=days,
            )
        )
        await db.flush()
        return

    balance = await get_balance(db, employee_id, leave_type.id, year)
    if balance is None:
        raise ValidationException.single(
            "leave_type_id", "Leave balance not found for this leave type",
        )
    raise ValidationException.single(
        "total_days",
        f"Insufficient leave balance. You have {format_days(balance.remaining_days)} "
        f"days remaining for {leave_type.name}",
    )


def format_days(value: Decimal) -> str:
    """Render 3.00 as '3' and 2.50 as '2.5'."""
    normalized = Decimal(value).normalize()
    return format(normalized, "f")
