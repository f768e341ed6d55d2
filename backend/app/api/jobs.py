from __future__ import annotations

import logging
import math
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from app.auth import get_current_user
from app.database import get_db
from app.models.job import JOB_PRIORITIES, JOB_STATUSES, Job
from app.models.resume import Resume
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.job import JobCreate, JobFields, JobListResponse, JobMatchOut, JobOut, JobStatsOut, JobUpdate
from app.services.matcher import JobMatcher

logger = logging.getLogger(__name__)

router = APIRouter()
matcher = JobMatcher()
RECENT_APPLICATION_DAYS = 7
MAX_PAGE_SIZE = 100
OPTIONAL_TEXT_FIELDS = (
    "job_type",
    "experience_level",
    "remote",
    "requirements",
    "additional_info",
    "application_url",
    "notes",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _parse_job_id(job_id: str) -> int:
    try:
        return int(job_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid job ID") from None


def _get_owned_job(db: Session, job_id: str, user: User) -> Job:
    job = (
        db.query(Job)
        .options(joinedload(Job.resume))
        .filter(Job.id == _parse_job_id(job_id), Job.user_id == user.id)
        .first()
    )
    if not job:
        raise HTTPException(status_code=404, detail="Job application not found")
    return job


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def status_summary(db: Session, user_id: int) -> tuple[int, dict[str, int], str]:
    """Return (total, per-status counts including ``unset``, success rate) for a user's jobs."""
    statuses = [row.status for row in db.query(Job.status).filter(Job.user_id == user_id).all()]
    counts = Counter(statuses)
    total = len(statuses)

    breakdown = {name: counts.get(name, 0) for name in JOB_STATUSES}
    breakdown["unset"] = counts.get(None, 0)
    success_rate = counts.get("Offer", 0) / total * 100 if total else 0.0
    return total, breakdown, f"{success_rate:.1f}%"


def _optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def _validated_status(value: str | None) -> str | None:
    if not value:
        return None
    if value not in JOB_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status value")
    return value


def _validated_priority(value: str) -> str:
    if value not in JOB_PRIORITIES:
        raise HTTPException(status_code=400, detail=f"Priority must be one of: {', '.join(JOB_PRIORITIES)}")
    return value


def _salary_text(value: str | int | float | None) -> str | None:
    if value is None:
        return None
    return str(value).strip() or None


def _validated_resume_id(db: Session, resume_id: int | None, user: User) -> int | None:
    if resume_id is None:
        return None
    owned = db.query(Resume.id).filter(Resume.id == resume_id, Resume.user_id == user.id).first()
    if not owned:
        raise HTTPException(status_code=404, detail="Resume not found")
    return resume_id


def _column_values(payload: JobFields, fields: set[str], db: Session, user: User) -> dict[str, Any]:
    """Validate and normalize the given payload fields into column values."""
    data = payload.model_dump()
    values: dict[str, Any] = {}
    for name in fields:
        value = data[name]
        if name in ("company", "position"):
            text = (value or "").strip()
            if not text:
                raise HTTPException(status_code=400, detail=f"{name.capitalize()} cannot be empty")
            values[name] = text
        elif name == "status":
            values[name] = _validated_status(value)
        elif name == "priority":
            values[name] = _validated_priority(value) if value is not None else None
        elif name == "salary":
            values[name] = _salary_text(value)
        elif name in ("description", "location"):
            values[name] = (value or "").strip()
        elif name in OPTIONAL_TEXT_FIELDS:
            values[name] = _optional_text(value)
        elif name == "resume_id":
            values[name] = _validated_resume_id(db, value, user)
        else:
            values[name] = value
    return values


@router.get("", response_model=JobListResponse)
def list_jobs(
    search: str | None = None,
    status_filter: str | None = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> JobListResponse:
    query = db.query(Job).filter(Job.user_id == current_user.id)
    if search and search.strip():
        pattern = f"%{_escape_like(search.strip())}%"
        query = query.filter(
            or_(Job.company.ilike(pattern, escape="\\"), Job.position.ilike(pattern, escape="\\"))
        )
    if status_filter:
        query = query.filter(Job.status == status_filter)

    total = query.count()
    jobs = (
        query.options(joinedload(Job.resume))
        .order_by(Job.created_at.desc(), Job.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return JobListResponse(
        jobs=[JobOut.model_validate(job) for job in jobs],
        pagination={"page": page, "limit": limit, "total": total, "pages": math.ceil(total / limit)},
    )


@router.post("", response_model=JobOut, status_code=status.HTTP_201_CREATED)
def create_job(
    payload: JobCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Job:
    if not (payload.company or "").strip() or not (payload.position or "").strip():
        raise HTTPException(status_code=400, detail="Company and position are required")

    values = _column_values(payload, set(JobFields.model_fields), db, current_user)
    values["priority"] = values["priority"] or "medium"
    if values["applied_at"] is None:
        values["applied_at"] = _utcnow()

    job = Job(user_id=current_user.id, **values)
    db.add(job)
    db.commit()
    db.refresh(job)
    logger.info("User %s created job application %s", current_user.id, job.id)
    return job


@router.get("/stats", response_model=JobStatsOut)
def job_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> JobStatsOut:
    total, breakdown, success_rate = status_summary(db, current_user.id)

    since = _utcnow() - timedelta(days=RECENT_APPLICATION_DAYS)
    recent = db.query(Job).filter(Job.user_id == current_user.id, Job.created_at >= since).count()

    return JobStatsOut(
        total_jobs=total,
        status_breakdown=breakdown,
        success_rate=success_rate,
        recent_applications=recent,
    )


@router.get("/{job_id}", response_model=JobOut)
def get_job(
    job_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Job:
    return _get_owned_job(db, job_id, current_user)


@router.put("/{job_id}", response_model=JobOut)
def update_job(
    job_id: str,
    payload: JobUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Job:
    job = _get_owned_job(db, job_id, current_user)
    values = _column_values(payload, payload.model_fields_set, db, current_user)
    if "priority" in values and values["priority"] is None:
        values.pop("priority")

    for name, value in values.items():
        setattr(job, name, value)
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


@router.delete("/{job_id}", response_model=MessageResponse)
def delete_job(
    job_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    job = _get_owned_job(db, job_id, current_user)
    db.delete(job)
    db.commit()
    return MessageResponse(message="Job application deleted successfully")


@router.get("/{job_id}/match", response_model=JobMatchOut)
def job_match(
    job_id: str,
    resume_id: int | None = Query(default=None, alias="resumeId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> JobMatchOut:
    job = _get_owned_job(db, job_id, current_user)
    resume_id = resume_id if resume_id is not None else job.resume_id
    if resume_id is None:
        raise HTTPException(status_code=400, detail="No resume linked to this job application")

    resume = db.query(Resume).filter(Resume.id == resume_id, Resume.user_id == current_user.id).first()
    if not resume:
        raise HTTPException(status_code=404, detail="Resume not found")

    result = matcher.calculate_match(
        resume.raw_text,
        {
            "description": job.description,
            "requirements": job.requirements,
            "additional_info": job.additional_info,
            "position": job.position,
            "job_type": job.job_type,
        },
    )
    return JobMatchOut(job_id=job.id, resume_id=resume.id, **result)
