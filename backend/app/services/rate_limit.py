from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass

from fastapi import HTTPException, Request, status

logger = logging.getLogger(__name__)


@dataclass
class _Window:
    count: int
    reset_at: float


class AuthRateLimiter:
    """Fixed-window attempt counter keyed by client host and route path.

    Used as a FastAPI dependency. State lives in process memory, so each
    worker process counts on its own.
    """

    def __init__(self, max_attempts: int, window_seconds: float, clock=time.monotonic) -> None:
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def __call__(self, request: Request) -> None:
        host = request.client.host if request.client else "unknown"
        self.hit(f"{host}:{request.url.path}")

    def hit(self, key: str) -> None:
        now = self._clock()
        with self._lock:
            self._drop_expired(now)
            window = self._windows.get(key)
            if window is None:
                window = _Window(count=0, reset_at=now + self.window_seconds)
                self._windows[key] = window
            if window.count >= self.max_attempts:
                retry_after = max(1, int(window.reset_at - now))
                logger.warning("Auth rate limit hit for %s", key)
                raise HTTPException(
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    detail={
                        "message": "Please wait before trying again",
                        "retryAfter": f"{self.window_seconds / 60:g} minutes",
                    },
                    headers={"Retry-After": str(retry_after)},
                )
            window.count += 1

    def _drop_expired(self, now: float) -> None:
        expired = [key for key, window in self._windows.items() if now >= window.reset_at]
        for key in expired:
            del self._windows[key]

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
