from __future__ import annotations

import secrets
import time
from dataclasses import dataclass, field
from pathlib import PurePath

ALLOWED_MIME_TYPES = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
    "application/rtf",
)
ALLOWED_EXTENSIONS = (".pdf", ".doc", ".docx", ".txt", ".rtf")
MAX_FILENAME_LENGTH = 255
DANGEROUS_PATTERNS = ("..", "/", "\\", ":", "*", "?", '"', "<", ">", "|")


@dataclass
class UploadCheck:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    too_large: bool = False
    extension: str = ""


def file_extension(filename: str) -> str:
    return PurePath(filename).suffix.lower()


def validate_upload(filename: str, size: int, mime_type: str, max_bytes: int) -> UploadCheck:
    errors: list[str] = []
    too_large = size > max_bytes
    if too_large:
        errors.append(f"File size too large. Maximum size is {max_bytes / (1024 * 1024):g}MB")
    if size == 0:
        errors.append("File cannot be empty")
    if mime_type not in ALLOWED_MIME_TYPES:
        errors.append(f"File type not allowed. Allowed types: {', '.join(ALLOWED_MIME_TYPES)}")

    extension = file_extension(filename)
    if extension not in ALLOWED_EXTENSIONS:
        errors.append(f"File extension not allowed. Allowed extensions: {', '.join(ALLOWED_EXTENSIONS)}")
    if len(filename) > MAX_FILENAME_LENGTH:
        errors.append(f"Filename is too long (maximum {MAX_FILENAME_LENGTH} characters)")
    if any(pattern in filename for pattern in DANGEROUS_PATTERNS):
        errors.append("Filename contains invalid characters")

    return UploadCheck(is_valid=not errors, errors=errors, too_large=too_large, extension=extension)


def generate_storage_key(user_id: int, original_name: str) -> str:
    timestamp = int(time.time() * 1000)
    token = secrets.token_hex(6)
    return f"resumes/user_{user_id}/{timestamp}_{token}{file_extension(original_name)}"
