"""Exception handlers that give every error response the same JSON envelope."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.services.storage import StorageError

logger = logging.getLogger(__name__)

SUGGESTIONS = {
    401: "Please log in again or check your authentication credentials",
    403: "You do not have permission to access this resource",
    404: "The requested resource could not be found",
    429: "You are making too many requests. Please wait and try again.",
}
SERVER_ERROR_SUGGESTION = "This is a server error. Please try again later or contact support if the problem persists."


def _reason(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def error_body(request: Request, status_code: int, message: str, extra: dict[str, Any] | None = None) -> dict:
    error: dict[str, Any] = {
        "type": _reason(status_code),
        "message": message,
        "statusCode": status_code,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if extra:
        error.update(extra)

    suggestion = SUGGESTIONS.get(status_code)
    if status_code >= 500:
        suggestion = SERVER_ERROR_SUGGESTION
    if suggestion:
        error.setdefault("suggestion", suggestion)

    if settings.is_development:
        error["details"] = {"path": request.url.path, "method": request.method}
    return {"error": error}


def _json_error(request: Request, status_code: int, message: str, extra=None, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_body(request, status_code, message, extra), headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail
    extra: dict[str, Any] | None = None
    if isinstance(detail, dict):
        extra = dict(detail)
        message = str(extra.pop("message", _reason(exc.status_code)))
    elif exc.status_code == 404 and detail == "Not Found":
        message = f"Route {request.method} {request.url.path} not found"
    else:
        message = str(detail)
    return _json_error(request, exc.status_code, message, extra, getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path"))
        problems.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return _json_error(request, 400, f"Validation failed: {', '.join(problems)}")


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return _json_error(request, 409, "A record with this information already exists")


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("Storage error on %s %s: %s", request.method, request.url.path, exc)
    return _json_error(request, 502, "File storage is temporarily unavailable")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _json_error(request, 500, "Internal Server Error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(StorageError, storage_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
