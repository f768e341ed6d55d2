from __future__ import annotations

from datetime import datetime

from app.schemas.common import CamelModel


class ResumeSummary(CamelModel):
    id: int
    title: str
    original_name: str
    file_name: str
    resume_type: str
    mime_type: str


class ResumeOut(CamelModel):
    id: int
    user_id: int
    title: str
    description: str | None = None
    original_name: str
    file_name: str
    file_url: str | None = None
    file_size: int
    mime_type: str
    resume_type: str
    is_active: bool
    download_count: int = 0
    keywords: list[str] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ResumeSetActiveRequest(CamelModel):
    is_active: bool
