from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api import auth, dashboard, jobs, resumes, users
from app.auth import get_current_user
from app.bootstrap import run_runtime_migrations
from app.config import settings
from app.database import Base, engine
from app.errors import register_exception_handlers
from app.logging_setup import setup_logging
from app.models import job, resume, user  # noqa: F401
from app.services.storage import StorageBackend, get_storage

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings.ensure_directories()
    Base.metadata.create_all(bind=engine)
    run_runtime_migrations(engine)
    logger.info("%s ready (%s)", settings.app_name, settings.environment)
    yield


setup_logging(settings.log_level)

app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


@app.get("/health")
@app.get("/api/health")
def health(storage: StorageBackend = Depends(get_storage)) -> dict:
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "version": settings.version,
        "storage": storage.health(),
    }


protected = [Depends(get_current_user)]

app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(users.router, prefix="/api/users", tags=["users"], dependencies=protected)
app.include_router(resumes.router, prefix="/api/resumes", tags=["resumes"], dependencies=protected)
app.include_router(jobs.router, prefix="/api/jobs", tags=["jobs"], dependencies=protected)
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"], dependencies=protected)
