"""Employee service layer — async CRUD, code generation, balances.

Uses:
  - ``paginate()`` from leavedesk.common.pagination
  - ``apply_filters / apply_search`` from leavedesk.common.filters
  - ``create_audit_entry`` from leavedesk.common.audit
  - ``allocate_balances`` from leavedesk.leave.ledger
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from leavedesk.auth.service import hash_password
from leavedesk.common.audit import create_audit_entry
from leavedesk.common.constants import (
    EMPLOYEE_CODE_PREFIX,
    GenderType,
    UserRole,
    has_permission,
)
from leavedesk.common.exceptions import (
    ConflictError,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from leavedesk.common.filters import apply_filters, apply_search
from leavedesk.common.pagination import PaginatedResponse, PaginationParams, paginate
from leavedesk.employees.models import Employee
from leavedesk.employees.schemas import (
    EmployeeCreate,
    EmployeeListItem,
    EmployeeOut,
    EmployeeUpdate,
)
from leavedesk.leave import calendar, ledger
from leavedesk.leave.models import LeaveBalance, LeaveType
from leavedesk.leave.schemas import LeaveBalanceOut

logger = logging.getLogger(__name__)

# Fields only HR may change, even on one's own profile
_HR_ONLY_FIELDS = ("role", "is_active", "joining_date")


# ═════════════════════════════════════════════════════════════════════
# EmployeeService
# ═════════════════════════════════════════════════════════════════════


class EmployeeService:
    """Async CRUD operations for employees."""

    # ── Helpers ─────────────────────────────────────────────────────

    @staticmethod
    async def _get(db: AsyncSession, employee_id: uuid.UUID) -> Employee:
        result = await db.execute(
            select(Employee)
            .where(Employee.id == employee_id)
            .execution_options(populate_existing=True)
        )
        employee = result.scalars().first()
        if employee is None:
            raise NotFoundException("Employee", str(employee_id), detail="Employee not found")
        return employee

    @staticmethod
    async def _ensure_unique_email(
        db: AsyncSession,
        email: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        query = select(Employee.id).where(func.lower(Employee.email) == email.lower())
        if exclude_id is not None:
            query = query.where(Employee.id != exclude_id)
        if (await db.execute(query)).first() is not None:
            raise ConflictError("email", email, detail="Email already exists")

    @staticmethod
    async def _next_employee_code(db: AsyncSession) -> str:
        """``EMP`` + 3-digit sequence, one past the highest code issued so far."""
        codes = (
            await db.execute(
                select(Employee.employee_code).where(
                    Employee.employee_code.like(f"{EMPLOYEE_CODE_PREFIX}%"),
                )
            )
        ).scalars().all()

        highest = 0
        for code in codes:
            suffix = code[len(EMPLOYEE_CODE_PREFIX):]
            if suffix.isdigit():
                highest = max(highest, int(suffix))
        return f"{EMPLOYEE_CODE_PREFIX}{highest + 1:03d}"

    @staticmethod
    def _can_manage(actor: Employee) -> bool:
        return has_permission(actor.role, "employee:update_any")

    # ── List (paginated, searchable, filterable) ────────────────────

    @staticmethod
    async def list_employees(
        db: AsyncSession,
        pagination: PaginationParams,
        *,
        search: Optional[str] = None,
        department: Optional[str] = None,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
    ) -> PaginatedResponse:
        """Return a paginated, filtered, searchable employee list ordered by name."""
        query = select(Employee)

        filters: dict[str, Any] = {
            "department": department,
            "role": role,
            "is_active": is_active,
        }
        query = apply_filters(query, Employee, filters)

        if search:
            query = apply_search(
                query, Employee, search, ["name", "email", "employee_code"],
            )

        query = query.order_by(Employee.name, Employee.employee_code)
        return await paginate(
            db, query, pagination,
            model=Employee,
            transform=EmployeeListItem.model_validate,
        )

    @staticmethod
    async def list_departments(db: AsyncSession) -> list[str]:
        """Distinct departments of active employees, alphabetically."""
        result = await db.execute(
            select(Employee.department)
            .where(Employee.is_active.is_(True))
            .distinct()
            .order_by(Employee.department)
        )
        return list(result.scalars().all())

    # ── Get single ──────────────────────────────────────────────────

    @staticmethod
    async def get_employee(
        db: AsyncSession,
        employee_id: uuid.UUID,
        actor: Employee,
    ) -> EmployeeOut:
        if employee_id != actor.id and not has_permission(actor.role, "employee:read_all"):
            raise ForbiddenException(detail="You can only view your own profile")
        employee = await EmployeeService._get(db, employee_id)
        return EmployeeOut.model_validate(employee)

    # ── Create ──────────────────────────────────────────────────────

    @staticmethod
    async def create_employee(
        db: AsyncSession,
        data: EmployeeCreate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> EmployeeOut:
        """Create an employee and allocate prorated balances for the current year."""
        if data.joining_date > calendar.today():
            raise ValidationException.single(
                "joining_date", "Joining date cannot be in the future",
            )
        email = data.email.lower()
        await EmployeeService._ensure_unique_email(db, email)

        employee = Employee(
            employee_code=await EmployeeService._next_employee_code(db),
            name=data.name.strip(),
            email=email,
            password_hash=hash_password(data.password),
            department=data.department.strip(),
            role=data.role,
            gender=data.gender,
            joining_date=data.joining_date,
        )
        db.add(employee)
        await db.flush()

        await ledger.allocate_balances(
            db, employee.id, employee.joining_date, calendar.current_year(),
        )

        await create_audit_entry(
            db,
            action="create",
            entity_type="employee",
            entity_id=employee.id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json", exclude={"password"}),
        )
        logger.info("Created employee %s (%s)", employee.employee_code, employee.email)

        await db.refresh(employee)
        return EmployeeOut.model_validate(employee)

    # ── Update ──────────────────────────────────────────────────────

    @staticmethod
    async def update_employee(
        db: AsyncSession,
        employee_id: uuid.UUID,
        data: EmployeeUpdate,
        actor: Employee,
    ) -> EmployeeOut:
        """Partial update.  Own profile or HR; role/status/joining date are HR-only."""
        is_manager = EmployeeService._can_manage(actor)
        if employee_id != actor.id and not is_manager:
            raise ForbiddenException(detail="You can only update your own profile")

        employee = await EmployeeService._get(db, employee_id)
        # Explicit nulls only clear nullable columns
        changes = {
            k: v for k, v in data.model_dump(exclude_unset=True).items()
            if v is not None or k == "gender"
        }
        if not is_manager:
            blocked = [f for f in _HR_ONLY_FIELDS if f in changes]
            if blocked:
                raise ForbiddenException(
                    detail=f"Only HR can change: {', '.join(blocked)}",
                )
        if not changes:
            return EmployeeOut.model_validate(employee)

        if "email" in changes:
            changes["email"] = changes["email"].lower()
            await EmployeeService._ensure_unique_email(db, changes["email"], employee.id)
        if changes.get("joining_date") and changes["joining_date"] > calendar.today():
            raise ValidationException.single(
                "joining_date", "Joining date cannot be in the future",
            )

        old_values: dict[str, Any] = {}
        for field, value in changes.items():
            old_values[field] = _jsonable(getattr(employee, field, None))
            setattr(employee, field, value)

        await db.flush()
        await create_audit_entry(
            db,
            action="update",
            entity_type="employee",
            entity_id=employee.id,
            actor_id=actor.id,
            old_values=old_values,
            new_values={k: _jsonable(v) for k, v in changes.items()},
        )
        logger.info("Updated employee %s fields=%s", employee.employee_code, sorted(old_values))

        await db.refresh(employee)
        return EmployeeOut.model_validate(employee)

    # ── Deactivate ──────────────────────────────────────────────────

    @staticmethod
    async def deactivate_employee(
        db: AsyncSession,
        employee_id: uuid.UUID,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> Employee:
        """Soft delete: history and balances are kept."""
        employee = await EmployeeService._get(db, employee_id)
        if employee_id == actor_id:
            raise ValidationException.single("id", "You cannot deactivate your own account")

        employee.is_active = False
        await db.flush()
        await create_audit_entry(
            db,
            action="deactivate",
            entity_type="employee",
            entity_id=employee.id,
            actor_id=actor_id,
            old_values={"is_active": True},
            new_values={"is_active": False},
        )
        logger.info("Deactivated employee %s", employee.employee_code)
        await db.refresh(employee)
        return employee

    # ── Balances ────────────────────────────────────────────────────

    @staticmethod
    async def get_balances(
        db: AsyncSession,
        employee_id: uuid.UUID,
        actor: Employee,
        *,
        year: int,
    ) -> list[LeaveBalanceOut]:
        """Balances for *year* across active leave types, ordered by type name."""
        if employee_id != actor.id and not has_permission(actor.role, "employee:read_all"):
            raise ForbiddenException(detail="You can only view your own leave balances")
        await EmployeeService._get(db, employee_id)

        result = await db.execute(
            select(LeaveBalance)
            .join(LeaveType, LeaveBalance.leave_type_id == LeaveType.id)
            .where(
                LeaveBalance.employee_id == employee_id,
                LeaveBalance.year == year,
                LeaveType.is_active.is_(True),
            )
            .options(selectinload(LeaveBalance.leave_type))
            .order_by(LeaveType.name)
            .execution_options(populate_existing=True)
        )
        return [LeaveBalanceOut.model_validate(b) for b in result.scalars().all()]


def _jsonable(value: Any) -> Any:
    if isinstance(value, (UserRole, GenderType)):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    return value
