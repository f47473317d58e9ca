"""Enums, permission table and constants for LeaveDesk."""

from __future__ import annotations

import enum


# ── Employee ────────────────────────────────────────────────────────

class GenderType(str, enum.Enum):
    male = "male"
    female = "female"
    other = "other"


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    employee = "employee"
    hr = "hr"
    admin = "admin"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    cancelled = "cancelled"


class HalfDaySession(str, enum.Enum):
    AM = "AM"
    PM = "PM"


class LeaveCategory(str, enum.Enum):
    """Behavioural class of a leave type.

    ``maternity`` / ``paternity`` are gender-gated and full-day only;
    ``unpaid`` skips the balance check.
    """

    standard = "standard"
    maternity = "maternity"
    paternity = "paternity"
    unpaid = "unpaid"


# Statuses that block the same dates for another request
ACTIVE_LEAVE_STATUSES: tuple[LeaveStatus, ...] = (
    LeaveStatus.pending,
    LeaveStatus.approved,
)


# ── Role-based permissions ──────────────────────────────────────────

_EMPLOYEE_PERMISSIONS: list[str] = [
    "profile:read_own",
    "profile:update_own",
    "leave:request",
    "leave:read_own",
    "leave:cancel_own",
    "leave_type:read",
    "holiday:read",
]

_HR_PERMISSIONS: list[str] = _EMPLOYEE_PERMISSIONS + [
    "employee:read_all",
    "employee:create",
    "employee:update_any",
    "employee:deactivate",
    "leave:read_all",
    "leave:approve",
    "leave:reject",
    "leave:cancel_any",
    "leave_type:manage",
    "holiday:manage",
    "dashboard:hr",
]

PERMISSIONS: dict[UserRole, list[str]] = {
    UserRole.employee: _EMPLOYEE_PERMISSIONS,
    UserRole.hr: _HR_PERMISSIONS,
    # admin holds every HR capability
    UserRole.admin: _HR_PERMISSIONS + [
        "system:configure",
    ],
}


def has_permission(role: UserRole | str, permission: str) -> bool:
    """Return True when *role* is granted *permission*."""
    try:
        role = UserRole(role)
    except ValueError:
        return False
    return permission in PERMISSIONS.get(role, [])


# ── Misc constants ──────────────────────────────────────────────────

HALF_DAY_VALUE = "0.5"
REASON_MIN_LENGTH = 10
REASON_MAX_LENGTH = 500
EMPLOYEE_CODE_PREFIX = "EMP"
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 50
