"""Auth Pydantic schemas for request / response validation."""


from pydantic import BaseModel, EmailStr, Field

from leavedesk.employees.schemas import EmployeeOut


# ── Requests ────────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=128)


# ── Responses ───────────────────────────────────────────────────────

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: EmployeeOut


class MeResponse(BaseModel):
    user: EmployeeOut
    permissions: list[str]


class VerifyResponse(BaseModel):
    valid: bool = True
    user: EmployeeOut
