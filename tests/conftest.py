# tests/conftest.py
"""
Shared fixtures for the ReportFlow test suite.

Environment is prepared before reportflow.main is imported anywhere:
a fixed API key, a throwaway log directory and rate limiting off.
"""
import os
import tempfile

TEST_API_KEY = "test-api-key-for-reportflow"

os.environ["REPORTFLOW_API_KEY"] = TEST_API_KEY
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="reportflow-test-logs-"))
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient

from reportflow.core.state import SessionValidationStore, ValidationCache
from reportflow.models.validation_state import ValidationState


class FakeClock:
    """Manually advanced clock for store and cache tests"""

    def __init__(self, now=0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, delta):
        self.now += delta


@pytest.fixture
def clock():
    """Clock starting at epoch millis 10_000_000"""
    return FakeClock(10_000_000)


@pytest.fixture
def store(clock):
    """Empty store driven by the fake clock"""
    return SessionValidationStore(clock=clock)


@pytest.fixture
def cache_clock():
    """Monotonic-style clock in seconds"""
    return FakeClock(1000.0)


@pytest.fixture
def cache(cache_clock):
    """Validation cache with a 300 second TTL on the fake clock"""
    return ValidationCache(ttl_seconds=300, clock=cache_clock)


@pytest.fixture
def sample_state():
    """A state one attempt into a conversation"""
    return ValidationState(
        provided_fields=["date"],
        cumulative_prompt="Suspect fled on foot",
        original_narrative="Suspect fled on foot",
        attempt_count=1,
    )


@pytest.fixture
def client():
    """Test client with the app lifespan running (fresh store per test)"""
    from reportflow.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    return {"X-API-Key": TEST_API_KEY}
