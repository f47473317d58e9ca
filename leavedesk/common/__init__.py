"""Common module — shared utilities for LeaveDesk."""

from leavedesk.common.audit import AuditTrail, create_audit_entry
from leavedesk.common.constants import (
    ACTIVE_LEAVE_STATUSES,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    PERMISSIONS,
    GenderType,
    HalfDaySession,
    LeaveCategory,
    LeaveStatus,
    UserRole,
    has_permission,
)
from leavedesk.common.exceptions import (
    AlreadyProcessedException,
    AppException,
    ConflictError,
    ForbiddenException,
    InvalidRangeException,
    NotFoundException,
    TooManyAttemptsException,
    UnauthorizedException,
    ValidationException,
    register_exception_handlers,
)
from leavedesk.common.filters import apply_filters, apply_search, apply_sorting
from leavedesk.common.pagination import (
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
    paginate,
)

__all__ = [
    # Audit
    "AuditTrail",
    "create_audit_entry",
    # Constants / Enums
    "GenderType",
    "HalfDaySession",
    "LeaveCategory",
    "LeaveStatus",
    "UserRole",
    "ACTIVE_LEAVE_STATUSES",
    "PERMISSIONS",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "has_permission",
    # Exceptions
    "AlreadyProcessedException",
    "AppException",
    "ConflictError",
    "ForbiddenException",
    "InvalidRangeException",
    "NotFoundException",
    "TooManyAttemptsException",
    "UnauthorizedException",
    "ValidationException",
    "register_exception_handlers",
    # Filters
    "apply_filters",
    "apply_search",
    "apply_sorting",
    # Pagination
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    "paginate",
]
