from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.jobs import status_summary
from app.auth import get_current_user
from app.database import get_db
from app.models.resume import Resume
from app.models.user import User
from app.schemas.dashboard import DashboardStatsOut

router = APIRouter()


@router.get("/stats", response_model=DashboardStatsOut)
def dashboard_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> DashboardStatsOut:
    total, breakdown, success_rate = status_summary(db, current_user.id)
    return DashboardStatsOut(
        total_jobs=total,
        total_resumes=db.query(Resume).filter(Resume.user_id == current_user.id).count(),
        job_stats=breakdown,
        success_rate=success_rate,
    )
