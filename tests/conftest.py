"""Shared test fixtures — async DB, client, auth helpers, factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Set test JWT_SECRET before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")

import uuid
from datetime import date, timedelta
from decimal import Decimal
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from leavedesk.auth.service import hash_password, open_session
from leavedesk.common.constants import GenderType, LeaveCategory, LeaveStatus, UserRole
from leavedesk.database import Base, get_db
from leavedesk.main import create_app

# Import ALL model modules so SQLAlchemy can resolve cross-module relationships
import leavedesk.auth.models  # noqa: F401
import leavedesk.common.audit  # noqa: F401
import leavedesk.employees.models  # noqa: F401
import leavedesk.holidays.models  # noqa: F401
import leavedesk.leave.models  # noqa: F401

from leavedesk.employees.models import Employee
from leavedesk.holidays.models import PublicHoliday
from leavedesk.leave import calendar
from leavedesk.leave.models import LeaveBalance, LeaveRequest, LeaveType


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)

# Hashing at 10 rounds per factory call would dominate the suite
TEST_PASSWORD = "password123"
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset slowapi storage between tests to prevent cross-test interference."""
    from leavedesk.common.rate_limit import limiter

    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Dates ───────────────────────────────────────────────────────────

def future_monday(weeks_ahead: int = 2) -> date:
    """A Monday at least *weeks_ahead* weeks from today."""
    today = calendar.today()
    return today + timedelta(days=(7 - today.weekday()) + 7 * (weeks_ahead - 1))


def future_saturday(weeks_ahead: int = 2) -> date:
    return future_monday(weeks_ahead) + timedelta(days=5)


# ── Model factories ─────────────────────────────────────────────────

async def make_employee(
    db: AsyncSession,
    *,
    name: str = "Test Employee",
    email: Optional[str] = None,
    department: str = "Engineering",
    role: UserRole = UserRole.employee,
    gender: Optional[GenderType] = GenderType.male,
    joining_date: date = date(2023, 1, 15),
    is_active: bool = True,
) -> Employee:
    emp = Employee(
        employee_code=f"T{uuid.uuid4().hex[:8].upper()}",
        name=name,
        email=email or f"{uuid.uuid4().hex[:8]}@company.com",
        password_hash=TEST_PASSWORD_HASH,
        department=department,
        role=role,
        gender=gender,
        joining_date=joining_date,
        is_active=is_active,
    )
    db.add(emp)
    await db.commit()
    await db.refresh(emp)
    return emp


async def make_leave_type(
    db: AsyncSession,
    *,
    name: str = "Annual Leave",
    default_days: int = 24,
    category: LeaveCategory = LeaveCategory.standard,
    color: str = "#10B981",
    is_active: bool = True,
) -> LeaveType:
    lt = LeaveType(
        name=name,
        description=f"{name} for tests",
        default_days=default_days,
        color=color,
        category=category,
        is_active=is_active,
    )
    db.add(lt)
    await db.commit()
    await db.refresh(lt)
    return lt


async def make_balance(
    db: AsyncSession,
    employee: Employee,
    leave_type: LeaveType,
    *,
    total: str = "24",
    used: str = "0",
    year: Optional[int] = None,
) -> LeaveBalance:
    bal = LeaveBalance(
        employee_id=employee.id,
        leave_type_id=leave_type.id,
        year=year or calendar.current_year(),
        total_days=Decimal(total),
        used_days=Decimal(used),
    )
    db.add(bal)
    await db.commit()
    await db.refresh(bal)
    return bal


async def make_holiday(
    db: AsyncSession,
    day: date,
    *,
    name: str = "Test Holiday",
    is_active: bool = True,
) -> PublicHoliday:
    holiday = PublicHoliday(name=name, date=day, description="", is_active=is_active)
    db.add(holiday)
    await db.commit()
    await db.refresh(holiday)
    return holiday


async def make_request(
    db: AsyncSession,
    employee: Employee,
    leave_type: LeaveType,
    *,
    start: date,
    end: Optional[date] = None,
    days: str = "1",
    status: LeaveStatus = LeaveStatus.pending,
    reason: str = "Family function out of town",
) -> LeaveRequest:
    req = LeaveRequest(
        employee_id=employee.id,
        leave_type_id=leave_type.id,
        start_date=start,
        end_date=end or start,
        total_days=Decimal(days),
        reason=reason,
        status=status,
    )
    db.add(req)
    await db.commit()
    await db.refresh(req)
    return req


# ── Auth helpers ────────────────────────────────────────────────────

async def auth_headers_for(db: AsyncSession, employee: Employee) -> dict[str, str]:
    """Bearer headers backed by a real persisted session."""
    token, _ = await open_session(db, employee)
    await db.commit()
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def employee(db) -> Employee:
    return await make_employee(db, name="John Doe", email="john.doe@company.com")


@pytest.fixture
async def hr_user(db) -> Employee:
    return await make_employee(
        db,
        name="Alice Brown",
        email="alice.brown@company.com",
        department="HR",
        role=UserRole.hr,
        gender=GenderType.female,
    )


@pytest.fixture
async def annual_leave(db) -> LeaveType:
    return await make_leave_type(db)


@pytest.fixture
async def auth_headers(db, employee) -> dict[str, str]:
    return await auth_headers_for(db, employee)


@pytest.fixture
async def hr_headers(db, hr_user) -> dict[str, str]:
    return await auth_headers_for(db, hr_user)
