"""Logging configuration for the API process."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

_NOISY_LOGGERS = ("botocore", "boto3", "s3transfer", "urllib3", "pdfminer", "multipart")


def setup_logging(level: int | str = logging.INFO) -> None:
    """
    Install a single rich console handler on the root logger.

    Args:
        level: Logging level, either a ``logging`` constant or its name.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = RichHandler(show_time=True, show_path=False, rich_tracebacks=True)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root_logger.addHandler(console_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
