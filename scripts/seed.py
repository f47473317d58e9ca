#!/usr/bin/env python3
"""Seed — sample employees, their leave balances and a few leave requests.

Run after ``alembic upgrade head`` (which seeds leave types and holidays).
Existing employees (matched by email) are left untouched, and balances are
only created where missing, so the script can be re-run safely.

Usage:
    python scripts/seed.py                 # seed for the current year
    python scripts/seed.py --year 2025     # allocate balances for another year
    python scripts/seed.py --no-requests   # employees + balances only

All sample accounts use the password ``password123``.
EMP004 (alice.brown@company.com) is the HR account.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

# ── Path setup ────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from dotenv import load_dotenv

# Settings are read at import time, so .env goes first
load_dotenv(PROJECT_ROOT / ".env")

from sqlalchemy import select  # noqa: E402

from leavedesk.auth.service import hash_password  # noqa: E402
from leavedesk.common.constants import GenderType, LeaveStatus, UserRole  # noqa: E402
from leavedesk.database import async_session_factory, engine  # noqa: E402
from leavedesk.employees.models import Employee  # noqa: E402
from leavedesk.leave import calendar, ledger  # noqa: E402
from leavedesk.leave.models import LeaveRequest, LeaveType  # noqa: E402

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("seed")

DEFAULT_PASSWORD = "password123"

EMPLOYEES = [
    ("EMP001", "John Doe", "john.doe@company.com", "Engineering", date(2023, 1, 15), UserRole.employee, GenderType.male),
    ("EMP002", "Jane Smith", "jane.smith@company.com", "Marketing", date(2023, 2, 1), UserRole.employee, GenderType.female),
    ("EMP003", "Bob Johnson", "bob.johnson@company.com", "Sales", date(2023, 3, 10), UserRole.employee, GenderType.male),
    ("EMP004", "Alice Brown", "alice.brown@company.com", "HR", date(2023, 1, 1), UserRole.hr, GenderType.female),
    ("EMP005", "Charlie Wilson", "charlie.wilson@company.com", "Finance", date(2023, 4, 1), UserRole.employee, GenderType.male),
    ("EMP006", "Diana Davis", "diana.davis@company.com", "Operations", date(2023, 5, 1), UserRole.employee, GenderType.female),
    ("EMP007", "Eve Miller", "eve.miller@company.com", "Engineering", date(2023, 6, 1), UserRole.employee, GenderType.female),
    ("EMP008", "Frank Garcia", "frank.garcia@company.com", "Marketing", date(2023, 7, 1), UserRole.employee, GenderType.male),
    ("EMP009", "Grace Lee", "grace.lee@company.com", "Sales", date(2023, 8, 1), UserRole.employee, GenderType.female),
    ("EMP010", "Henry Taylor", "henry.taylor@company.com", "Engineering", date(2023, 9, 1), UserRole.employee, GenderType.male),
]

# (email, leave type, start (month, day), end (month, day), days, reason, status)
SAMPLE_REQUESTS = [
    ("john.doe@company.com", "Annual Leave", (12, 15), (12, 19), "5", "Year-end vacation with family", LeaveStatus.pending),
    ("jane.smith@company.com", "Sick Leave", (6, 10), (6, 12), "3", "Not feeling well, need rest", LeaveStatus.approved),
    ("bob.johnson@company.com", "Casual Leave", (11, 20), (11, 20), "1", "Personal appointment downtown", LeaveStatus.pending),
    ("eve.miller@company.com", "Sick Leave", (6, 18), (6, 19), "2", "Doctor appointment and recovery", LeaveStatus.approved),
]


async def seed_employees(db, hashed: str) -> dict[str, Employee]:
    existing = {
        e.email: e for e in (await db.execute(select(Employee))).scalars().all()
    }
    for code, name, email, dept, joining, role, gender in EMPLOYEES:
        if email in existing:
            continue
        employee = Employee(
            employee_code=code,
            name=name,
            email=email,
            password_hash=hashed,
            department=dept,
            joining_date=joining,
            role=role,
            gender=gender,
        )
        db.add(employee)
        existing[email] = employee
        logger.info("Added employee %s %s", code, email)
    await db.flush()
    return existing


async def seed_requests(db, employees: dict[str, Employee], year: int) -> int:
    types = {
        lt.name: lt for lt in (await db.execute(select(LeaveType))).scalars().all()
    }
    hr = next((e for e in employees.values() if e.role == UserRole.hr), None)
    created = 0

    for email, type_name, start, end, days, reason, status in SAMPLE_REQUESTS:
        employee, leave_type = employees.get(email), types.get(type_name)
        if employee is None or leave_type is None:
            logger.warning("Skipping sample request for %s (%s): missing row", email, type_name)
            continue
        start_date, end_date = date(year, *start), date(year, *end)
        dup = await db.execute(
            select(LeaveRequest.id).where(
                LeaveRequest.employee_id == employee.id,
                LeaveRequest.start_date == start_date,
            )
        )
        if dup.first() is not None:
            continue

        request = LeaveRequest(
            employee_id=employee.id,
            leave_type_id=leave_type.id,
            start_date=start_date,
            end_date=end_date,
            total_days=Decimal(days),
            reason=reason,
            status=status,
        )
        if status == LeaveStatus.approved:
            await ledger.record_usage(
                db, employee_id=employee.id, leave_type=leave_type, year=year, days=Decimal(days),
            )
            request.approved_by = hr.id if hr else None
        db.add(request)
        created += 1

    await db.flush()
    return created


async def run(year: int, with_requests: bool) -> None:
    hashed = hash_password(DEFAULT_PASSWORD)

    async with async_session_factory() as db:
        try:
            employees = await seed_employees(db, hashed)

            allocated = 0
            for employee in employees.values():
                rows = await ledger.allocate_balances(db, employee.id, employee.joining_date, year)
                allocated += len(rows)
            logger.info("Allocated %d balance rows for %d", allocated, year)

            if with_requests:
                created = await seed_requests(db, employees, year)
                logger.info("Created %d sample leave requests", created)

            await db.commit()
        except Exception:
            await db.rollback()
            logger.exception("Seeding failed; rolled back")
            raise
        finally:
            await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed sample Leavedesk data")
    parser.add_argument("--year", type=int, default=None, help="Leave year (default: current)")
    parser.add_argument("--no-requests", action="store_true", help="Skip sample leave requests")
    args = parser.parse_args()

    year = args.year or calendar.current_year()
    logger.info("Seeding Leavedesk data for %d", year)
    asyncio.run(run(year, with_requests=not args.no_requests))
    logger.info("Done. Sample password: %s (HR: alice.brown@company.com)", DEFAULT_PASSWORD)


if __name__ == "__main__":
    main()
