"""Auth router — email/password login, token refresh, logout, current user."""


from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import extract_bearer, get_current_user
from leavedesk.auth.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    MeResponse,
    TokenResponse,
    VerifyResponse,
)
from leavedesk.auth.service import (
    authenticate,
    change_password,
    open_session,
    revoke_session,
    rotate_session,
)
from leavedesk.common.audit import create_audit_entry
from leavedesk.common.constants import PERMISSIONS, UserRole
from leavedesk.common.rate_limit import (
    LoginAttemptLimiter,
    client_identity,
    get_login_limiter,
    limiter,
)
from leavedesk.database import get_db
from leavedesk.employees.models import Employee
from leavedesk.employees.schemas import EmployeeOut

router = APIRouter(prefix="", tags=["auth"])


def _client(request: Request) -> tuple[Optional[str], Optional[str]]:
    ip = request.client.host if request.client else None
    return ip, request.headers.get("user-agent")


# ── POST /login — Email + password ──────────────────────────────────

@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    request: Request,
    attempts: LoginAttemptLimiter = Depends(get_login_limiter),
    db: AsyncSession = Depends(get_db),
):
    # 1. Every attempt counts against the caller's window
    attempts.hit(client_identity(request))

    # 2. Credentials + active flag
    employee = await authenticate(db, body.email, body.password)

    # 3. Session (JWT)
    ip, user_agent = _client(request)
    access_token, expires_in = await open_session(db, employee, ip, user_agent)

    # 4. Audit trail
    await create_audit_entry(
        db,
        action="login",
        entity_type="user_session",
        entity_id=employee.id,
        actor_id=employee.id,
        new_values={"ip": ip, "user_agent": user_agent},
        ip_address=ip,
        user_agent=user_agent,
    )

    return TokenResponse(
        access_token=access_token,
        expires_in=expires_in,
        user=EmployeeOut.model_validate(employee),
    )


# ── POST /refresh — Rotate the current session ──────────────────────

@router.post("/refresh", response_model=TokenResponse)
@limiter.limit("10/minute")
async def refresh_token(
    request: Request,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Revoke the presented token's session and issue a new token."""
    ip, user_agent = _client(request)
    access_token, expires_in = await rotate_session(
        db, employee, extract_bearer(request), ip, user_agent,
    )
    return TokenResponse(
        access_token=access_token,
        expires_in=expires_in,
        user=EmployeeOut.model_validate(employee),
    )


# ── POST /logout — Revoke current session ───────────────────────────

@router.post("/logout")
async def logout(
    request: Request,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await revoke_session(db, extract_bearer(request))

    ip, user_agent = _client(request)
    await create_audit_entry(
        db,
        action="logout",
        entity_type="user_session",
        entity_id=employee.id,
        actor_id=employee.id,
        ip_address=ip,
        user_agent=user_agent,
    )
    return {"message": "Logged out successfully"}


# ── GET /me — Current user profile ──────────────────────────────────

@router.get("/me", response_model=MeResponse)
async def me(
    request: Request,
    employee: Employee = Depends(get_current_user),
):
    role: UserRole = request.state.user_role
    return MeResponse(
        user=EmployeeOut.model_validate(employee),
        permissions=PERMISSIONS.get(role, []),
    )


# ── GET /profile — Alias of /me without permissions ─────────────────

@router.get("/profile", response_model=EmployeeOut)
async def profile(employee: Employee = Depends(get_current_user)):
    return EmployeeOut.model_validate(employee)


# ── GET /verify — Token check ───────────────────────────────────────

@router.get("/verify", response_model=VerifyResponse)
async def verify(employee: Employee = Depends(get_current_user)):
    return VerifyResponse(user=EmployeeOut.model_validate(employee))


# ── POST /change-password ───────────────────────────────────────────

@router.post("/change-password")
async def change_password_route(
    body: ChangePasswordRequest,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await change_password(db, employee, body.current_password, body.new_password)
    await create_audit_entry(
        db,
        action="change_password",
        entity_type="employee",
        entity_id=employee.id,
        actor_id=employee.id,
    )
    return {"message": "Password changed successfully"}
