from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.auth import ensure_strong_password
from app.auth import get_current_user, hash_password, verify_password
from app.database import get_db
from app.models.job import Job
from app.models.resume import Resume
from app.models.user import User
from app.schemas.auth import PasswordChangeRequest
from app.schemas.common import MessageResponse
from app.schemas.user import AccountDeleteRequest, UserActivity, UserOut, UserProfileUpdate, UserStatsOut, UserStatsUser
from app.services.storage import StorageBackend, get_storage
from app.services.validators import validate_email

logger = logging.getLogger(__name__)

router = APIRouter()
RECENT_ACTIVITY_DAYS = 30
MIN_NAME_LENGTH = 2


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


@router.get("/profile", response_model=UserOut)
def get_profile(current_user: User = Depends(get_current_user)) -> User:
    return current_user


@router.put("/profile", response_model=UserOut)
def update_profile(
    payload: UserProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> User:
    changes = payload.model_dump(exclude_unset=True)
    updates: dict[str, str] = {}

    for name, label in (("first_name", "First name"), ("last_name", "Last name")):
        if name in changes:
            value = (changes[name] or "").strip()
            if len(value) < MIN_NAME_LENGTH:
                raise HTTPException(status_code=400, detail=f"{label} must be at least {MIN_NAME_LENGTH} characters long")
            updates[name] = value

    if "email" in changes:
        email = (changes["email"] or "").strip().lower()
        if not validate_email(email).is_valid:
            raise HTTPException(status_code=400, detail="Invalid email format")
        taken = db.query(User.id).filter(User.email == email, User.id != current_user.id).first()
        if taken:
            raise HTTPException(status_code=409, detail="Email is already taken")
        updates["email"] = email

    if not updates:
        raise HTTPException(status_code=400, detail="No valid fields to update")

    for name, value in updates.items():
        setattr(current_user, name, value)
    db.add(current_user)
    db.commit()
    db.refresh(current_user)
    return current_user


@router.put("/change-password", response_model=MessageResponse)
def change_password(
    payload: PasswordChangeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    if not payload.current_password or not payload.new_password:
        raise HTTPException(status_code=400, detail="Current password and new password are required")
    if not verify_password(payload.current_password, current_user.password_hash):
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    ensure_strong_password(payload.new_password, message="Password validation failed")

    current_user.password_hash = hash_password(payload.new_password)
    db.add(current_user)
    db.commit()
    return MessageResponse(message="Password changed successfully")


@router.get("/stats", response_model=UserStatsOut)
def user_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserStatsOut:
    now = _utcnow()
    since = now - timedelta(days=RECENT_ACTIVITY_DAYS)
    jobs = db.query(Job).filter(Job.user_id == current_user.id)
    resumes = db.query(Resume).filter(Resume.user_id == current_user.id)

    created_at = current_user.created_at
    days_since_creation = max(0, (now - created_at).days) if created_at else 0

    return UserStatsOut(
        user=UserStatsUser(
            id=current_user.id,
            email=current_user.email,
            first_name=current_user.first_name,
            last_name=current_user.last_name,
            member_since=created_at,
            days_since_creation=days_since_creation,
        ),
        activity=UserActivity(
            total_jobs=jobs.count(),
            total_resumes=resumes.count(),
            recent_jobs=jobs.filter(Job.created_at >= since).count(),
            recent_resumes=resumes.filter(Resume.created_at >= since).count(),
        ),
    )


@router.delete("/account", response_model=MessageResponse)
def delete_account(
    payload: AccountDeleteRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage),
) -> MessageResponse:
    if not payload.password:
        raise HTTPException(status_code=400, detail="Password confirmation is required to delete account")
    if not verify_password(payload.password, current_user.password_hash):
        raise HTTPException(status_code=400, detail="Incorrect password")

    keys = [row.file_name for row in db.query(Resume.file_name).filter(Resume.user_id == current_user.id).all()]
    user_id = current_user.id
    db.delete(current_user)
    db.commit()

    for key in keys:
        if not storage.delete(key):
            logger.warning("Stored resume %s left behind after deleting user %s", key, user_id)
    logger.info("Deleted account %s", user_id)
    return MessageResponse(message="Account deleted successfully")
