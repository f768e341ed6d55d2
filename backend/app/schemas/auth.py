from __future__ import annotations

from pydantic import Field

from app.schemas.common import CamelModel
from app.schemas.user import UserOut


class RegisterRequest(CamelModel):
    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1, max_length=256)
    first_name: str = Field(min_length=1, max_length=120)
    last_name: str = Field(min_length=1, max_length=120)
    phone: str | None = None
    location: str | None = None


class LoginRequest(CamelModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class AuthResponse(CamelModel):
    message: str
    user: UserOut
    token: str
    token_type: str = "Bearer"
    expires_in: str


class ProfileUpdateRequest(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    location: str | None = None
    profile_picture: str | None = None


class PasswordChangeRequest(CamelModel):
    current_password: str = ""
    new_password: str = ""


class EmailAvailabilityResponse(CamelModel):
    email: str
    available: bool
    message: str
