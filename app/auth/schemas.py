"""Account request/response schemas"""
from uuid import UUID
from typing import Optional
from pydantic import EmailStr, Field

from app.db.models import Role
from app.profiles.schemas import ProfileResponse
from app.practitioners.schemas import PresenceStatusResponse
from app.utils.casing import CamelModel


class SignupRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1, max_length=255)
    role: Role


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class LogoutRequest(CamelModel):
    refresh_token: str


class RoleInitRequest(CamelModel):
    role: Role


class AccountUser(CamelModel):
    id: UUID
    email: Optional[str] = None


class SessionTokensResponse(CamelModel):
    """Tokens for a freshly signed-in account"""
    user: AccountUser
    access_token: str
    refresh_token: Optional[str] = None
    profile: ProfileResponse


class CurrentUserResponse(CamelModel):
    id: UUID
    profile: ProfileResponse
    practitioner: Optional[PresenceStatusResponse] = None


class LogoutResponse(CamelModel):
    success: bool
