from __future__ import annotations

from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel


class UserOut(CamelModel):
    id: int
    email: str
    first_name: str
    last_name: str
    phone: str | None = None
    location: str | None = None
    profile_picture: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserCounts(CamelModel):
    jobs: int = 0
    resumes: int = 0


class UserWithCountsOut(UserOut):
    counts: UserCounts = Field(default_factory=UserCounts, alias="_count")


class MeResponse(CamelModel):
    message: str
    user: UserWithCountsOut


class UserProfileUpdate(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None


class AccountDeleteRequest(CamelModel):
    password: str = ""


class UserStatsUser(CamelModel):
    id: int
    email: str
    first_name: str
    last_name: str
    member_since: datetime | None = None
    days_since_creation: int = 0


class UserActivity(CamelModel):
    total_jobs: int = 0
    total_resumes: int = 0
    recent_jobs: int = 0
    recent_resumes: int = 0


class UserStatsOut(CamelModel):
    user: UserStatsUser
    activity: UserActivity
