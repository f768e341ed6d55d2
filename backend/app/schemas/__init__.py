from app.schemas.auth import AuthResponse, LoginRequest, PasswordChangeRequest, ProfileUpdateRequest, RegisterRequest
from app.schemas.dashboard import DashboardStatsOut
from app.schemas.job import JobCreate, JobListResponse, JobMatchOut, JobOut, JobStatsOut, JobUpdate
from app.schemas.resume import ResumeOut, ResumeSetActiveRequest, ResumeSummary
from app.schemas.user import MeResponse, UserOut, UserProfileUpdate, UserStatsOut

__all__ = [
    "AuthResponse",
    "LoginRequest",
    "RegisterRequest",
    "ProfileUpdateRequest",
    "PasswordChangeRequest",
    "UserOut",
    "MeResponse",
    "UserProfileUpdate",
    "UserStatsOut",
    "JobCreate",
    "JobUpdate",
    "JobOut",
    "JobListResponse",
    "JobStatsOut",
    "JobMatchOut",
    "DashboardStatsOut",
    "ResumeOut",
    "ResumeSummary",
    "ResumeSetActiveRequest",
]
