from __future__ import annotations

from app.schemas.common import CamelModel


class DashboardStatsOut(CamelModel):
    total_jobs: int
    total_resumes: int
    job_stats: dict[str, int]
    success_rate: str
