from __future__ import annotations

from datetime import datetime

from pydantic import field_validator

from app.schemas.common import CamelModel, blank_to_none
from app.schemas.resume import ResumeSummary


class JobFields(CamelModel):
    company: str | None = None
    position: str | None = None
    status: str | None = None
    description: str | None = None
    salary: str | int | float | None = None
    location: str | None = None
    applied_at: datetime | None = None
    job_type: str | None = None
    experience_level: str | None = None
    remote: str | None = None
    requirements: str | None = None
    additional_info: str | None = None
    application_url: str | None = None
    priority: str | None = None
    notes: str | None = None
    interview_date: datetime | None = None
    follow_up_date: datetime | None = None
    resume_id: int | None = None

    @field_validator("applied_at", "interview_date", "follow_up_date", "resume_id", mode="before")
    @classmethod
    def _blank_is_null(cls, value):
        return blank_to_none(value)


class JobCreate(JobFields):
    priority: str | None = "medium"


class JobUpdate(JobFields):
    pass


class JobOut(CamelModel):
    id: int
    user_id: int
    resume_id: int | None = None
    company: str
    position: str
    location: str | None = None
    job_type: str | None = None
    experience_level: str | None = None
    remote: str | None = None
    salary: str | None = None
    description: str | None = None
    requirements: str | None = None
    additional_info: str | None = None
    application_url: str | None = None
    status: str | None = None
    priority: str
    notes: str | None = None
    applied_at: datetime | None = None
    interview_date: datetime | None = None
    follow_up_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    resume: ResumeSummary | None = None


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class JobListResponse(CamelModel):
    jobs: list[JobOut]
    pagination: Pagination


class JobStatsOut(CamelModel):
    total_jobs: int
    status_breakdown: dict[str, int]
    success_rate: str
    recent_applications: int


class CategoryMatch(CamelModel):
    matched: int = 0
    total: int = 0


class MatchBreakdown(CamelModel):
    matched: list[str] = []
    missing: list[str] = []
    categories: dict[str, CategoryMatch] = {}


class JobMatchOut(CamelModel):
    job_id: int
    resume_id: int
    percentage: int
    breakdown: MatchBreakdown
    suggestions: list[str] = []
