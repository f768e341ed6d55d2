from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import unquote


def _split_origins(raw: str) -> list[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass
class Settings:
    app_name: str = "JobTracker API"
    version: str = "1.0.0"
    environment: str = os.getenv("ENV", "development")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./db/jobtracker.db")
    jwt_secret: str = os.getenv("JWT_SECRET", "fallback-secret-key-for-development")
    jwt_expires_days: int = int(os.getenv("JWT_EXPIRES_DAYS", "7"))
    jwt_issuer: str = "jobtracker-api"
    jwt_audience: str = "jobtracker-app"
    cors_origins: list[str] = field(
        default_factory=lambda: _split_origins(os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000"))
    )
    storage_backend: str = os.getenv("STORAGE_BACKEND", "local").lower()
    upload_dir: str = os.getenv("UPLOAD_DIR", "./uploads")
    s3_bucket: str = os.getenv("AWS_S3_BUCKET", "jobtracker-resumes-dev")
    aws_region: str = os.getenv("AWS_REGION", "us-east-1")
    signed_url_ttl_seconds: int = int(os.getenv("SIGNED_URL_TTL_SECONDS", "3600"))
    max_resume_size_mb: int = int(os.getenv("MAX_RESUME_SIZE_MB", "5"))
    auth_rate_limit_window_minutes: int = int(os.getenv("AUTH_RATE_LIMIT_WINDOW_MINUTES", "15"))

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def max_resume_size_bytes(self) -> int:
        return self.max_resume_size_mb * 1024 * 1024

    def ensure_directories(self) -> None:
        if self.storage_backend == "local":
            Path(self.upload_dir).mkdir(parents=True, exist_ok=True)
        self._ensure_sqlite_directory()

    def _ensure_sqlite_directory(self) -> None:
        if not self.database_url.startswith("sqlite:///"):
            return
        raw_path = self.database_url.replace("sqlite:///", "", 1)
        if not raw_path or raw_path == ":memory:":
            return
        db_path = Path(unquote(raw_path))
        if not db_path.is_absolute():
            db_path = Path(".") / db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)


settings = Settings()
