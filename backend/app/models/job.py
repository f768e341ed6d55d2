from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import relationship

from app.database import Base

JOB_STATUSES = (
    "Applied",
    "Pending",
    "First Interview",
    "Second Interview",
    "Third Interview",
    "Final Interview",
    "Offer",
    "Rejected",
)
JOB_PRIORITIES = ("low", "medium", "high")


class Job(Base):
    """A job application tracked by one user."""

    __tablename__ = "jobs"
    __table_args__ = (
        Index("idx_jobs_user_created", "user_id", "created_at"),
        Index("idx_jobs_user_status", "user_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    resume_id = Column(Integer, ForeignKey("resumes.id", ondelete="SET NULL"))
    company = Column(String(255), nullable=False)
    position = Column(String(255), nullable=False)
    location = Column(String(255))
    job_type = Column(String(50))
    experience_level = Column(String(50))
    remote = Column(String(50))
    salary = Column(String(100))
    description = Column(Text)
    requirements = Column(Text)
    additional_info = Column(Text)
    application_url = Column(String(1000))
    # Null means the user has not picked a status yet.
    status = Column(String(50))
    priority = Column(String(20), default="medium", nullable=False)
    notes = Column(Text)
    applied_at = Column(DateTime)
    interview_date = Column(DateTime)
    follow_up_date = Column(DateTime)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="jobs")
    resume = relationship("Resume", back_populates="jobs")
