from __future__ import annotations

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import RedirectResponse, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth import get_current_user
from app.config import settings
from app.database import get_db
from app.models.job import Job
from app.models.resume import Resume
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.resume import ResumeOut, ResumeSetActiveRequest
from app.services.resume_parser import ResumeParser
from app.services.storage import ObjectNotFoundError, StorageBackend, get_storage
from app.services.uploads import generate_storage_key, validate_upload

logger = logging.getLogger(__name__)

router = APIRouter()
parser = ResumeParser()


def _parse_resume_id(resume_id: str) -> int:
    try:
        return int(resume_id)
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail={"message": "Invalid resume ID", "reason": "Resume ID is required and must be a valid number"},
        ) from None


def _get_owned_resume(db: Session, resume_id: str, user: User) -> Resume:
    resume = db.query(Resume).filter(Resume.id == _parse_resume_id(resume_id), Resume.user_id == user.id).first()
    if not resume:
        raise HTTPException(status_code=404, detail="Resume not found")
    return resume


def _get_accessible_resume(db: Session, resume_id: str, user: User, action: str) -> Resume:
    resume = db.query(Resume).filter(Resume.id == _parse_resume_id(resume_id)).first()
    if not resume:
        raise HTTPException(status_code=404, detail="Resume not found")
    if resume.user_id != user.id:
        raise HTTPException(status_code=403, detail=f"Access denied - you can only {action} your own resumes")
    return resume


def _content_disposition(kind: str, filename: str) -> str:
    return f"{kind}; filename*=UTF-8''{quote(filename)}"


def _serve_file(resume: Resume, storage: StorageBackend, disposition: str) -> Response:
    url = storage.presigned_url(resume.file_name, expires_in=settings.signed_url_ttl_seconds)
    if url:
        return RedirectResponse(url, status_code=status.HTTP_302_FOUND)

    try:
        data = storage.read(resume.file_name)
    except ObjectNotFoundError:
        raise HTTPException(
            status_code=404,
            detail={
                "message": "Resume file not found",
                "reason": "This resume does not have an associated file. Please re-upload the resume.",
            },
        ) from None
    return Response(
        content=data,
        media_type=resume.mime_type,
        headers={"Content-Disposition": _content_disposition(disposition, resume.original_name)},
    )


@router.post("", response_model=ResumeOut, status_code=status.HTTP_201_CREATED)
def upload_resume(
    file: UploadFile = File(...),
    title: str | None = Form(default=None),
    description: str | None = Form(default=None),
    resume_type: str | None = Form(default=None, alias="resumeType"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage),
) -> Resume:
    if not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    # One byte past the cap is enough to know the upload is too large.
    raw = file.file.read(settings.max_resume_size_bytes + 1)
    mime_type = file.content_type or "application/octet-stream"
    check = validate_upload(file.filename, len(raw), mime_type, settings.max_resume_size_bytes)
    if check.too_large:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Maximum size is {settings.max_resume_size_mb}MB.",
        )
    if not check.is_valid:
        raise HTTPException(status_code=400, detail="; ".join(check.errors))

    key = generate_storage_key(current_user.id, file.filename)
    stored = storage.put(
        key,
        raw,
        mime_type,
        metadata={"uploaded-by": str(current_user.id), "original-name": quote(file.filename)},
    )
    parsed = parser.parse(raw, check.extension)

    resume = Resume(
        user_id=current_user.id,
        title=(title or "").strip() or file.filename,
        description=(description or "").strip(),
        original_name=file.filename,
        file_name=stored.key,
        file_url=stored.url,
        file_size=stored.size,
        mime_type=mime_type,
        resume_type=(resume_type or "").strip() or "general",
        raw_text=parsed["raw_text"],
        keywords=parsed["keywords"],
    )
    try:
        db.add(resume)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        storage.delete(stored.key)
        raise
    db.refresh(resume)
    logger.info("Stored resume %s for user %s at %s", resume.id, current_user.id, stored.key)
    return resume


@router.get("", response_model=list[ResumeOut])
def list_resumes(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[Resume]:
    return (
        db.query(Resume)
        .filter(Resume.user_id == current_user.id)
        .order_by(Resume.created_at.desc(), Resume.id.desc())
        .all()
    )


@router.get("/{resume_id}", response_model=ResumeOut)
def get_resume(
    resume_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Resume:
    return _get_owned_resume(db, resume_id, current_user)


@router.get("/{resume_id}/preview")
def preview_resume(
    resume_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage),
) -> Response:
    resume = _get_accessible_resume(db, resume_id, current_user, "access")
    return _serve_file(resume, storage, "inline")


@router.get("/{resume_id}/download")
def download_resume(
    resume_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage),
) -> Response:
    resume = _get_accessible_resume(db, resume_id, current_user, "download")
    response = _serve_file(resume, storage, "attachment")

    try:
        resume.download_count = (resume.download_count or 0) + 1
        db.add(resume)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to increment download count for resume %s: %s", resume.id, exc)
    return response


@router.put("/{resume_id}/set-active", response_model=ResumeOut)
def set_active_resume(
    resume_id: str,
    payload: ResumeSetActiveRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Resume:
    resume = _get_owned_resume(db, resume_id, current_user)

    if payload.is_active:
        db.query(Resume).filter(Resume.user_id == current_user.id, Resume.id != resume.id).update(
            {Resume.is_active: False}, synchronize_session=False
        )

    resume.is_active = payload.is_active
    db.add(resume)
    db.commit()
    db.refresh(resume)
    return resume


@router.delete("/{resume_id}", response_model=MessageResponse)
def delete_resume(
    resume_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage),
) -> MessageResponse:
    resume = _get_owned_resume(db, resume_id, current_user)

    if not storage.delete(resume.file_name):
        logger.warning("Continuing with delete of resume %s although its stored file remains", resume.id)

    db.query(Job).filter(Job.resume_id == resume.id).update({Job.resume_id: None}, synchronize_session=False)
    db.delete(resume)
    db.commit()
    return MessageResponse(message="Resume deleted successfully")
