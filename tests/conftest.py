"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It sets TESTING so no .env file is loaded, and provides the environment
the settings module needs at import time.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["TESTING"] = "true"
os.environ.setdefault("APP_ENV", "testing")

# Set default env vars that all tests might need
os.environ.setdefault("CRPT_BASE_URL", "https://crpt.test")
os.environ.setdefault("CRPT_AUTH_TOKEN", "test-token-123")
os.environ.setdefault("APP_RATE_LIMIT_TIME_UNIT", "seconds")
os.environ.setdefault("APP_RATE_LIMIT_REQUESTS", "5")

import pytest  # noqa: E402


class FakeClock:
    """Deterministic millisecond clock for non-blocking limiter checks."""

    def __init__(self, start: int = 1_000_000) -> None:
        self.current = start

    def __call__(self) -> int:
        return self.current

    def advance(self, millis: int) -> None:
        self.current += millis


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
