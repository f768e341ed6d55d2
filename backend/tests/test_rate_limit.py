import pytest
from fastapi import HTTPException

from app.services.rate_limit import AuthRateLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_blocks_after_max_attempts():
    limiter = AuthRateLimiter(max_attempts=2, window_seconds=900, clock=FakeClock())

    limiter.hit("127.0.0.1:/api/auth/login")
    limiter.hit("127.0.0.1:/api/auth/login")
    with pytest.raises(HTTPException) as excinfo:
        limiter.hit("127.0.0.1:/api/auth/login")

    assert excinfo.value.status_code == 429
    assert excinfo.value.detail["retryAfter"] == "15 minutes"
    assert excinfo.value.headers["Retry-After"] == "900"


def test_window_resets_after_expiry():
    clock = FakeClock()
    limiter = AuthRateLimiter(max_attempts=1, window_seconds=60, clock=clock)

    limiter.hit("host:/login")
    clock.now = 61
    limiter.hit("host:/login")


def test_keys_are_counted_separately():
    limiter = AuthRateLimiter(max_attempts=1, window_seconds=60, clock=FakeClock())

    limiter.hit("a:/login")
    limiter.hit("b:/login")
    limiter.hit("a:/register")


def test_reset_clears_counters():
    limiter = AuthRateLimiter(max_attempts=1, window_seconds=60, clock=FakeClock())

    limiter.hit("host:/login")
    limiter.reset()
    limiter.hit("host:/login")


def test_expired_windows_are_dropped():
    clock = FakeClock()
    limiter = AuthRateLimiter(max_attempts=5, window_seconds=60, clock=clock)

    for index in range(10):
        limiter.hit(f"10.0.0.{index}:/login")
    clock.now = 61
    limiter.hit("10.0.0.99:/login")

    assert list(limiter._windows) == ["10.0.0.99:/login"]
