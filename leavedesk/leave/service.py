"""Leave service layer — request validation, lifecycle, listings, leave types.

Business logic:
  - Ordered eligibility checks before a request is created
  - pending → approved | rejected | cancelled, exactly once
  - Balance debit on approval through the ledger's atomic UPDATE
  - Request listings / stats scoped by the caller's permissions
  - Leave-type CRUD with soft delete
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from leavedesk.common.audit import create_audit_entry
from leavedesk.common.constants import (
    ACTIVE_LEAVE_STATUSES,
    HALF_DAY_VALUE,
    REASON_MIN_LENGTH,
    GenderType,
    LeaveCategory,
    LeaveStatus,
    has_permission,
)
from leavedesk.common.exceptions import (
    AlreadyProcessedException,
    ConflictError,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from leavedesk.common.filters import apply_filters
from leavedesk.common.pagination import PaginatedResponse, PaginationParams, paginate
from leavedesk.config import settings
from leavedesk.employees.models import Employee
from leavedesk.leave import calendar, ledger
from leavedesk.leave.models import LeaveRequest, LeaveType
from leavedesk.leave.schemas import (
    CalendarDayOut,
    LeaveRequestCreate,
    LeaveRequestOut,
    LeaveStatsOut,
    LeaveStatusUpdate,
    LeaveTypeBreakdownItem,
    LeaveTypeCreate,
    LeaveTypeOut,
    LeaveTypeUpdate,
    StatusBreakdownItem,
)

logger = logging.getLogger(__name__)

_GENDER_GATED = (LeaveCategory.maternity, LeaveCategory.paternity)


# ═════════════════════════════════════════════════════════════════════
# LeaveService
# ═════════════════════════════════════════════════════════════════════


class LeaveService:
    """Async leave-request operations: apply, decide, cancel, list, stats."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def _load_request(
        db: AsyncSession,
        request_id: uuid.UUID,
        *,
        lock: bool = False,
    ) -> LeaveRequest:
        """Load a request with employee / type / approver, optionally FOR UPDATE."""
        query = (
            select(LeaveRequest)
            .where(LeaveRequest.id == request_id)
            .options(
                selectinload(LeaveRequest.employee),
                selectinload(LeaveRequest.leave_type),
                selectinload(LeaveRequest.approver),
            )
            .execution_options(populate_existing=True)
        )
        if lock:
            query = query.with_for_update()

        result = await db.execute(query)
        leave_request = result.scalars().first()
        if leave_request is None:
            raise NotFoundException(
                "LeaveRequest", str(request_id), detail="Leave request not found",
            )
        return leave_request

    @staticmethod
    async def _to_out(db: AsyncSession, request_id: uuid.UUID) -> LeaveRequestOut:
        leave_request = await LeaveService._load_request(db, request_id)
        return LeaveRequestOut.model_validate(leave_request)

    @staticmethod
    def _can_read_all(actor: Employee) -> bool:
        return has_permission(actor.role, "leave:read_all")

    # ─────────────────────────────────────────────────────────────────
    # Working days
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def compute_working_days(
        db: AsyncSession,
        start_date: date,
        end_date: date,
    ) -> int:
        """Weekdays in [start_date, end_date] minus active public holidays."""
        return await calendar.compute_working_days(db, start_date, end_date)

    @staticmethod
    async def describe_day(db: AsyncSession, day: date) -> CalendarDayOut:
        holiday = await calendar.is_public_holiday(db, day)
        return CalendarDayOut(
            day=day,
            is_weekend=not calendar.is_weekday(day),
            is_public_holiday=holiday,
            is_working_day=await calendar.is_working_day(db, day),
            next_working_day=calendar.next_working_day(day),
            previous_working_day=calendar.previous_working_day(day),
            fiscal_year=calendar.fiscal_year(day),
        )

    # ─────────────────────────────────────────────────────────────────
    # Apply
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def validate_and_create_request(
        db: AsyncSession,
        employee_id: uuid.UUID,
        data: LeaveRequestCreate,
    ) -> LeaveRequestOut:
        """Run the eligibility checks in order and persist a pending request.

        Checks (first failure wins):
          1. no date in the past
          2. not before the joining date
          3. half-day: single working, non-holiday date with a session
          4. no overlap with the employee's pending/approved requests
          5. at least one working day (half-day counts 0.5)
          6. maternity/paternity gender gating, never half-day
          7. enough current-year balance (unpaid types skip this)

        The employee row is locked for the rest of the transaction so two
        concurrent applications by the same person cannot both pass the
        overlap check.
        """
        today = calendar.today()

        # ── 1. Past dates ───────────────────────────────────────────
        if data.start_date < today or data.end_date < today:
            raise ValidationException.single(
                "start_date", "Cannot apply for leave in the past",
            )

        emp_result = await db.execute(
            select(Employee)
            .where(Employee.id == employee_id, Employee.is_active.is_(True))
            .with_for_update()
        )
        employee = emp_result.scalars().first()
        if employee is None:
            raise NotFoundException(
                "Employee", str(employee_id), detail="Employee not found or inactive",
            )

        lt_result = await db.execute(
            select(LeaveType).where(
                LeaveType.id == data.leave_type_id,
                LeaveType.is_active.is_(True),
            )
        )
        leave_type = lt_result.scalars().first()
        if leave_type is None:
            raise NotFoundException(
                "LeaveType", str(data.leave_type_id), detail="Leave type not found",
            )

        # ── 2. Joining date ─────────────────────────────────────────
        if data.start_date < employee.joining_date:
            raise ValidationException.single(
                "start_date", "Cannot apply for leave before joining date",
            )

        # ── 3. Half-day shape ───────────────────────────────────────
        if data.is_half_day:
            if data.start_date != data.end_date:
                raise ValidationException.single(
                    "end_date", "Half-day leave must start and end on the same date",
                )
            if not await calendar.is_working_day(db, data.start_date):
                raise ValidationException.single(
                    "start_date",
                    "Half-day leave must be on a working day (Mon-Fri)"
                    if not calendar.is_weekday(data.start_date)
                    else "Half-day leave cannot be on a public holiday",
                )
            if data.half_day_session is None:
                raise ValidationException.single(
                    "half_day_session", "Half-day session (AM or PM) is required",
                )

        # ── 4. Overlap (inclusive) ──────────────────────────────────
        overlap = await db.execute(
            select(LeaveRequest.id).where(
                LeaveRequest.employee_id == employee.id,
                LeaveRequest.status.in_(ACTIVE_LEAVE_STATUSES),
                LeaveRequest.start_date <= data.end_date,
                LeaveRequest.end_date >= data.start_date,
            ).limit(1)
        )
        if overlap.first() is not None:
            raise ValidationException.single(
                "start_date", "You have overlapping leave requests for these dates",
            )

        # ── 5. Day count ────────────────────────────────────────────
        if data.is_half_day:
            total_days = Decimal(HALF_DAY_VALUE)
        else:
            total_days = Decimal(
                await calendar.compute_working_days(db, data.start_date, data.end_date)
            )
        if total_days <= 0:
            raise ValidationException.single(
                "date_range", "Invalid date range or no working days selected",
            )

        # ── 6. Category gating ──────────────────────────────────────
        if (
            leave_type.category == LeaveCategory.maternity
            and employee.gender != GenderType.female
        ):
            raise ValidationException.single(
                "leave_type_id", "Maternity leave is available only to female employees",
            )
        if (
            leave_type.category == LeaveCategory.paternity
            and employee.gender != GenderType.male
        ):
            raise ValidationException.single(
                "leave_type_id", "Paternity leave is available only to male employees",
            )
        if leave_type.category in _GENDER_GATED and data.is_half_day:
            raise ValidationException.single(
                "is_half_day", "Half-day is not allowed for Maternity/Paternity leave",
            )

        # ── 7. Balance ──────────────────────────────────────────────
        if not leave_type.is_unpaid:
            balance = await ledger.get_balance(
                db, employee.id, leave_type.id, calendar.current_year(),
            )
            if balance is None:
                raise ValidationException.single(
                    "leave_type_id", "Leave balance not found for this leave type",
                )
            if balance.remaining_days < total_days:
                raise ValidationException.single(
                    "total_days",
                    "Insufficient leave balance. You have "
                    f"{ledger.format_days(balance.remaining_days)} days remaining "
                    f"for {leave_type.name}",
                )

        # ── Persist ─────────────────────────────────────────────────
        leave_request = LeaveRequest(
            employee_id=employee.id,
            leave_type_id=leave_type.id,
            start_date=data.start_date,
            end_date=data.end_date,
            total_days=total_days,
            is_half_day=data.is_half_day,
            half_day_session=data.half_day_session if data.is_half_day else None,
            reason=data.reason,
            status=LeaveStatus.pending,
        )
        db.add(leave_request)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="leave_request",
            entity_id=leave_request.id,
            actor_id=employee.id,
            new_values={
                **data.model_dump(mode="json"),
                "total_days": str(total_days),
                "status": LeaveStatus.pending.value,
            },
        )
        logger.info(
            "Leave request %s created: employee=%s type=%s %s..%s (%s days)",
            leave_request.id, employee.employee_code, leave_type.name,
            data.start_date, data.end_date, total_days,
        )

        return await LeaveService._to_out(db, leave_request.id)

    # ─────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def transition_request(
        db: AsyncSession,
        request_id: uuid.UUID,
        new_status: LeaveStatus,
        actor: Employee,
        reason: Optional[str] = None,
    ) -> LeaveRequestOut:
        """Move a pending request to approved, rejected or cancelled.

        * approved  — needs ``leave:approve``; debits the current-year balance
        * rejected  — needs ``leave:reject``; reason of at least 10 characters
        * cancelled — owner, or ``leave:cancel_any``; no balance effect

        Raises:
            ForbiddenException: actor lacks the capability.
            AlreadyProcessedException: request is no longer pending.
            ValidationException: bad rejection reason, unknown target status,
                or the balance can no longer cover the request.
        """
        leave_request = await LeaveService._load_request(db, request_id, lock=True)
        current = LeaveStatus(leave_request.status)

        if new_status == LeaveStatus.cancelled:
            is_owner = leave_request.employee_id == actor.id
            if not is_owner and not has_permission(actor.role, "leave:cancel_any"):
                raise ForbiddenException(
                    detail="You can only cancel your own leave requests",
                )
            if current != LeaveStatus.pending:
                raise AlreadyProcessedException(
                    f"Cannot cancel {current.value} leave request",
                )

        elif new_status in (LeaveStatus.approved, LeaveStatus.rejected):
            permission = (
                "leave:approve" if new_status == LeaveStatus.approved else "leave:reject"
            )
            if not has_permission(actor.role, permission):
                raise ForbiddenException(
                    detail="Only HR can approve or reject leave requests",
                )
            if current != LeaveStatus.pending:
                raise AlreadyProcessedException(
                    f"Leave request is already {current.value}",
                )
            if new_status == LeaveStatus.rejected:
                reason = (reason or "").strip()
                if not reason:
                    raise ValidationException.single(
                        "rejection_reason",
                        "Rejection reason is required when rejecting a leave request",
                    )
                if len(reason) < REASON_MIN_LENGTH:
                    raise ValidationException.single(
                        "rejection_reason",
                        f"Rejection reason must be at least {REASON_MIN_LENGTH} characters",
                    )

        else:
            raise ValidationException.single(
                "status", "Status must be one of: approved, rejected, cancelled",
            )

        now = datetime.now(timezone.utc)
        if new_status == LeaveStatus.approved:
            await ledger.record_usage(
                db,
                employee_id=leave_request.employee_id,
                leave_type=leave_request.leave_type,
                year=calendar.current_year(),
                days=Decimal(leave_request.total_days),
            )
            leave_request.approved_by = actor.id
            leave_request.approved_at = now
        elif new_status == LeaveStatus.rejected:
            leave_request.approved_by = actor.id
            leave_request.approved_at = now
            leave_request.rejection_reason = reason
        else:
            leave_request.cancelled_at = now

        leave_request.status = new_status
        await db.flush()

        await create_audit_entry(
            db,
            action={
                LeaveStatus.approved: "approve",
                LeaveStatus.rejected: "reject",
                LeaveStatus.cancelled: "cancel",
            }[new_status],
            entity_type="leave_request",
            entity_id=leave_request.id,
            actor_id=actor.id,
            old_values={"status": current.value},
            new_values={
                "status": new_status.value,
                "rejection_reason": leave_request.rejection_reason,
            },
        )
        logger.info(
            "Leave request %s %s -> %s by %s",
            leave_request.id, current.value, new_status.value, actor.employee_code,
        )

        return await LeaveService._to_out(db, leave_request.id)

    @staticmethod
    async def update_status(
        db: AsyncSession,
        request_id: uuid.UUID,
        data: LeaveStatusUpdate,
        actor: Employee,
    ) -> LeaveRequestOut:
        """HR decision endpoint: only approved / rejected are accepted."""
        if data.status not in (LeaveStatus.approved, LeaveStatus.rejected):
            raise ValidationException.single(
                "status", "Status must be either approved or rejected",
            )
        return await LeaveService.transition_request(
            db, request_id, data.status, actor, data.rejection_reason,
        )

    @staticmethod
    async def cancel_request(
        db: AsyncSession,
        request_id: uuid.UUID,
        actor: Employee,
    ) -> LeaveRequestOut:
        return await LeaveService.transition_request(
            db, request_id, LeaveStatus.cancelled, actor,
        )

    # ─────────────────────────────────────────────────────────────────
    # Read
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def list_requests(
        db: AsyncSession,
        actor: Employee,
        pagination: PaginationParams,
        *,
        status: Optional[LeaveStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        employee_id: Optional[uuid.UUID] = None,
        leave_type_id: Optional[uuid.UUID] = None,
    ) -> PaginatedResponse:
        """HR sees every request; everyone else only their own. Newest first."""
        query = select(LeaveRequest).options(
            selectinload(LeaveRequest.employee),
            selectinload(LeaveRequest.leave_type),
            selectinload(LeaveRequest.approver),
        )
        if not LeaveService._can_read_all(actor):
            employee_id = actor.id

        filters: dict[str, Any] = {
            "employee_id": employee_id,
            "leave_type_id": leave_type_id,
            "status": status,
            "start_date__from": start_date,
            "end_date__to": end_date,
        }
        query = apply_filters(query, LeaveRequest, filters)
        query = query.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id)

        return await paginate(
            db, query, pagination,
            model=LeaveRequest,
            transform=LeaveRequestOut.model_validate,
        )

    @staticmethod
    async def get_request(
        db: AsyncSession,
        request_id: uuid.UUID,
        actor: Employee,
    ) -> LeaveRequestOut:
        leave_request = await LeaveService._load_request(db, request_id)
        if leave_request.employee_id != actor.id and not LeaveService._can_read_all(actor):
            raise ForbiddenException(detail="You can only view your own leave requests")
        return LeaveRequestOut.model_validate(leave_request)

    @staticmethod
    async def get_stats(db: AsyncSession, actor: Employee) -> LeaveStatsOut:
        """Per-status and per-type counts / day totals for the current year."""
        year = calendar.current_year()
        conditions = [
            LeaveRequest.start_date >= date(year, 1, 1),
            LeaveRequest.start_date <= date(year, 12, 31),
        ]
        if not LeaveService._can_read_all(actor):
            conditions.append(LeaveRequest.employee_id == actor.id)

        status_rows = await db.execute(
            select(
                LeaveRequest.status,
                func.count(LeaveRequest.id),
                func.coalesce(func.sum(LeaveRequest.total_days), 0),
            )
            .where(*conditions)
            .group_by(LeaveRequest.status)
        )
        by_status = [
            StatusBreakdownItem(status=row[0], count=row[1], total_days=Decimal(str(row[2])))
            for row in status_rows.all()
        ]

        type_rows = await db.execute(
            select(
                LeaveType.id,
                LeaveType.name,
                LeaveType.color,
                func.count(LeaveRequest.id),
                func.coalesce(func.sum(LeaveRequest.total_days), 0),
            )
            .join(LeaveType, LeaveRequest.leave_type_id == LeaveType.id)
            .where(*conditions)
            .group_by(LeaveType.id, LeaveType.name, LeaveType.color)
        )
        by_type = [
            LeaveTypeBreakdownItem(
                leave_type_id=row[0],
                leave_type_name=row[1],
                leave_type_color=row[2],
                count=row[3],
                total_days=Decimal(str(row[4])),
            )
            for row in type_rows.all()
        ]
        by_type.sort(key=lambda item: item.total_days, reverse=True)

        return LeaveStatsOut(
            year=year,
            status_breakdown=sorted(by_status, key=lambda item: item.status.value),
            leave_type_breakdown=by_type,
        )


# ═════════════════════════════════════════════════════════════════════
# LeaveTypeService
# ═════════════════════════════════════════════════════════════════════


class LeaveTypeService:
    """Async CRUD for leave types. Deletion is soft and blocked once used."""

    @staticmethod
    async def _get(db: AsyncSession, leave_type_id: uuid.UUID) -> LeaveType:
        result = await db.execute(select(LeaveType).where(LeaveType.id == leave_type_id))
        leave_type = result.scalars().first()
        if leave_type is None:
            raise NotFoundException(
                "LeaveType", str(leave_type_id), detail="Leave type not found",
            )
        return leave_type

    @staticmethod
    async def _ensure_unique_name(
        db: AsyncSession,
        name: str,
        *,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        query = select(LeaveType.id).where(func.lower(LeaveType.name) == name.lower())
        if exclude_id is not None:
            query = query.where(LeaveType.id != exclude_id)
        if (await db.execute(query)).first() is not None:
            raise ConflictError(
                "name", name, detail="Leave type with this name already exists",
            )

    @staticmethod
    async def _in_use(db: AsyncSession, leave_type_id: uuid.UUID) -> bool:
        result = await db.execute(
            select(LeaveRequest.id).where(LeaveRequest.leave_type_id == leave_type_id).limit(1)
        )
        return result.first() is not None

    @staticmethod
    async def list_leave_types(
        db: AsyncSession,
        *,
        include_inactive: bool = False,
    ) -> list[LeaveTypeOut]:
        query = select(LeaveType).order_by(LeaveType.name)
        if not include_inactive:
            query = query.where(LeaveType.is_active.is_(True))
        result = await db.execute(query)
        return [LeaveTypeOut.model_validate(lt) for lt in result.scalars().all()]

    @staticmethod
    async def get_leave_type(db: AsyncSession, leave_type_id: uuid.UUID) -> LeaveTypeOut:
        return LeaveTypeOut.model_validate(await LeaveTypeService._get(db, leave_type_id))

    @staticmethod
    async def create_leave_type(
        db: AsyncSession,
        data: LeaveTypeCreate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> LeaveTypeOut:
        await LeaveTypeService._ensure_unique_name(db, data.name)

        leave_type = LeaveType(
            name=data.name,
            default_days=data.default_days,
            color=data.color or settings.DEFAULT_LEAVE_TYPE_COLOR,
            description=data.description,
            category=data.category,
        )
        db.add(leave_type)
        await db.flush()
        await db.refresh(leave_type)

        await create_audit_entry(
            db,
            action="create",
            entity_type="leave_type",
            entity_id=leave_type.id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json"),
        )
        logger.info("Leave type %r created (%s days)", leave_type.name, leave_type.default_days)
        return LeaveTypeOut.model_validate(leave_type)

    @staticmethod
    async def update_leave_type(
        db: AsyncSession,
        leave_type_id: uuid.UUID,
        data: LeaveTypeUpdate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> LeaveTypeOut:
        leave_type = await LeaveTypeService._get(db, leave_type_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            return LeaveTypeOut.model_validate(leave_type)

        if "name" in changes:
            await LeaveTypeService._ensure_unique_name(
                db, changes["name"], exclude_id=leave_type.id,
            )
        # Pending requests were validated against the current category.
        if (
            changes.get("category", leave_type.category) != leave_type.category
            and await LeaveTypeService._in_use(db, leave_type.id)
        ):
            raise ValidationException.single(
                "category",
                "Cannot change category of leave type that is being used in leave requests",
            )

        old_values = {
            field: _jsonable(getattr(leave_type, field)) for field in changes
        }
        for field, value in changes.items():
            setattr(leave_type, field, value)
        await db.flush()
        await db.refresh(leave_type)

        await create_audit_entry(
            db,
            action="update",
            entity_type="leave_type",
            entity_id=leave_type.id,
            actor_id=actor_id,
            old_values=old_values,
            new_values=data.model_dump(mode="json", exclude_unset=True, exclude_none=True),
        )
        return LeaveTypeOut.model_validate(leave_type)

    @staticmethod
    async def delete_leave_type(
        db: AsyncSession,
        leave_type_id: uuid.UUID,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> None:
        """Soft delete; refused once any leave request references the type."""
        leave_type = await LeaveTypeService._get(db, leave_type_id)

        if await LeaveTypeService._in_use(db, leave_type.id):
            raise ValidationException.single(
                "leave_type_id",
                "Cannot delete leave type that is being used in leave requests",
            )

        leave_type.is_active = False
        await db.flush()

        await create_audit_entry(
            db,
            action="delete",
            entity_type="leave_type",
            entity_id=leave_type.id,
            actor_id=actor_id,
            old_values={"is_active": True},
            new_values={"is_active": False},
        )
        logger.info("Leave type %r deactivated", leave_type.name)


def _jsonable(value: Any) -> Any:
    if isinstance(value, (LeaveCategory, LeaveStatus)):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    return value
