"""Auth service — password hashing, credential check, JWT + session lifecycle."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import hash_token
from leavedesk.auth.models import UserSession
from leavedesk.common.constants import UserRole
from leavedesk.common.exceptions import UnauthorizedException, ValidationException
from leavedesk.config import settings
from leavedesk.employees.models import Employee

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 10


# ── Passwords ───────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    return bcrypt.hashpw(
        password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS),
    ).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


# ── Credentials ─────────────────────────────────────────────────────

async def authenticate(db: AsyncSession, email: str, password: str) -> Employee:
    """Return the employee for valid credentials, else raise 401."""
    result = await db.execute(
        select(Employee).where(Employee.email == email.lower()),
    )
    employee = result.scalars().first()
    if employee is None:
        logger.info("Login failed: unknown email %s", email)
        raise UnauthorizedException("Invalid email or password")
    if not employee.is_active:
        logger.info("Login refused: %s is deactivated", employee.employee_code)
        raise UnauthorizedException("Account is deactivated. Please contact HR.")
    if not verify_password(password, employee.password_hash):
        logger.info("Login failed: bad password for %s", employee.employee_code)
        raise UnauthorizedException("Invalid email or password")
    return employee


async def change_password(
    db: AsyncSession,
    employee: Employee,
    current_password: str,
    new_password: str,
) -> None:
    if not verify_password(current_password, employee.password_hash):
        raise ValidationException.single(
            "current_password", "Current password is incorrect",
        )
    if current_password == new_password:
        raise ValidationException.single(
            "new_password", "New password must be different from current password",
        )
    employee.password_hash = hash_password(new_password)
    await db.flush()
    logger.info("Password changed for %s", employee.employee_code)


# ── JWT helpers ─────────────────────────────────────────────────────

def create_access_token(employee_id: uuid.UUID, role: UserRole) -> tuple[str, int]:
    """Return (encoded_jwt, expires_in_seconds)."""
    expires_in = settings.JWT_EXPIRY_HOURS * 3600
    payload = {
        "sub": str(employee_id),
        "role": UserRole(role).value,
        "type": "access",
        "jti": uuid.uuid4().hex,  # distinct token (and session hash) per issue
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, expires_in


# ── Session management ──────────────────────────────────────────────

async def open_session(
    db: AsyncSession,
    employee: Employee,
    ip: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> tuple[str, int]:
    """Issue an access token and persist its session.  Returns (token, expires_in)."""
    access_token, expires_in = create_access_token(employee.id, employee.role)
    db.add(
        UserSession(
            employee_id=employee.id,
            token_hash=hash_token(access_token),
            ip_address=ip,
            user_agent=user_agent,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        )
    )
    await db.flush()
    return access_token, expires_in


async def revoke_session(db: AsyncSession, token: str) -> None:
    """Mark the session of *token* as revoked."""
    result = await db.execute(
        select(UserSession).where(UserSession.token_hash == hash_token(token)),
    )
    session = result.scalars().first()
    if session:
        session.is_revoked = True
        await db.flush()


async def rotate_session(
    db: AsyncSession,
    employee: Employee,
    token: str,
    ip: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> tuple[str, int]:
    """Revoke the session of *token* and open a fresh one."""
    await revoke_session(db, token)
    return await open_session(db, employee, ip, user_agent)
