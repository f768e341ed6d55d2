from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship
from sqlalchemy.types import JSON

from app.database import Base


class Resume(Base):
    __tablename__ = "resumes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    original_name = Column(String(255), nullable=False)
    file_name = Column(String(500), nullable=False)
    file_url = Column(String(1000))
    file_size = Column(Integer, nullable=False)
    mime_type = Column(String(255), nullable=False)
    resume_type = Column(String(50), default="general", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    download_count = Column(Integer, default=0, nullable=False)
    raw_text = Column(Text)
    keywords = Column(JSON)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="resumes")
    jobs = relationship("Job", back_populates="resume", passive_deletes=True)
