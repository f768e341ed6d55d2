from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.auth import create_access_token, get_current_user, hash_password, token_lifetime_label, verify_password
from app.config import settings
from app.database import get_db
from app.models.job import Job
from app.models.resume import Resume
from app.models.user import User
from app.schemas.auth import (
    AuthResponse,
    EmailAvailabilityResponse,
    LoginRequest,
    PasswordChangeRequest,
    ProfileUpdateRequest,
    RegisterRequest,
)
from app.schemas.common import MessageResponse
from app.schemas.user import MeResponse, UserCounts, UserOut, UserWithCountsOut
from app.services.rate_limit import AuthRateLimiter
from app.services.validators import validate_email, validate_password

logger = logging.getLogger(__name__)

router = APIRouter()
_window_seconds = settings.auth_rate_limit_window_minutes * 60
register_limiter = AuthRateLimiter(max_attempts=3, window_seconds=_window_seconds)
login_limiter = AuthRateLimiter(max_attempts=5, window_seconds=_window_seconds)


def _optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def _auth_response(user: User, message: str) -> AuthResponse:
    return AuthResponse(
        message=message,
        user=UserOut.model_validate(user),
        token=create_access_token(user),
        expires_in=token_lifetime_label(),
    )


def ensure_strong_password(password: str, message: str = "Weak password") -> None:
    check = validate_password(password)
    if not check.is_valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": message,
                "reason": "Password does not meet security requirements",
                "requirements": check.errors,
                "strength": check.strength.as_dict(),
            },
        )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(register_limiter)],
)
def register(payload: RegisterRequest, db: Session = Depends(get_db)) -> AuthResponse:
    email = payload.email.strip().lower()
    email_check = validate_email(email)
    if not email_check.is_valid:
        raise HTTPException(
            status_code=400,
            detail={"message": "Please provide a valid email address", "reason": "Invalid email", "errors": email_check.errors},
        )
    ensure_strong_password(payload.password)

    first_name = payload.first_name.strip()
    last_name = payload.last_name.strip()
    if not first_name or not last_name:
        raise HTTPException(status_code=400, detail="First name and last name are required")

    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=409, detail="An account with this email address already exists")

    user = User(
        email=email,
        password_hash=hash_password(payload.password),
        first_name=first_name,
        last_name=last_name,
        phone=_optional_text(payload.phone),
        location=_optional_text(payload.location),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return _auth_response(user, "Account created successfully")


@router.post("/login", response_model=AuthResponse, dependencies=[Depends(login_limiter)])
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> AuthResponse:
    email = payload.email.strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account disabled")

    return _auth_response(user, "Login successful")


@router.post("/logout", response_model=MessageResponse)
def logout(current_user: User = Depends(get_current_user)) -> MessageResponse:
    # Tokens are stateless; the client discards its copy.
    return MessageResponse(message="Logout successful")


@router.get("/me", response_model=MeResponse, response_model_by_alias=True)
def me(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> MeResponse:
    counts = UserCounts(
        jobs=db.query(Job).filter(Job.user_id == current_user.id).count(),
        resumes=db.query(Resume).filter(Resume.user_id == current_user.id).count(),
    )
    profile = UserOut.model_validate(current_user).model_dump()
    return MeResponse(message="User profile retrieved", user=UserWithCountsOut(**profile, counts=counts))


@router.put("/profile", response_model=UserOut)
def update_profile(
    payload: ProfileUpdateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> User:
    changes = payload.model_dump(exclude_unset=True)
    for name in ("first_name", "last_name"):
        if name in changes:
            value = (changes[name] or "").strip()
            if not value:
                raise HTTPException(status_code=400, detail=f"{name.replace('_', ' ').capitalize()} cannot be empty")
            setattr(current_user, name, value)
    for name in ("phone", "location", "profile_picture"):
        if name in changes:
            setattr(current_user, name, _optional_text(changes[name]))

    db.add(current_user)
    db.commit()
    db.refresh(current_user)
    return current_user


@router.put("/password", response_model=MessageResponse)
def change_password(
    payload: PasswordChangeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    if not payload.current_password or not payload.new_password:
        raise HTTPException(status_code=400, detail="Current password and new password are required")
    if not verify_password(payload.current_password, current_user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Current password is incorrect")
    ensure_strong_password(payload.new_password, message="Weak new password")

    current_user.password_hash = hash_password(payload.new_password)
    db.add(current_user)
    db.commit()
    return MessageResponse(message="Password changed successfully")


@router.get("/check-email/{email}", response_model=EmailAvailabilityResponse)
def check_email(email: str, db: Session = Depends(get_db)) -> EmailAvailabilityResponse:
    email = email.strip().lower()
    check = validate_email(email)
    if not check.is_valid:
        raise HTTPException(status_code=400, detail={"message": "Invalid email format", "errors": check.errors})

    taken = db.query(User.id).filter(User.email == email).first() is not None
    return EmailAvailabilityResponse(
        email=email,
        available=not taken,
        message="Email is already registered" if taken else "Email is available",
    )
