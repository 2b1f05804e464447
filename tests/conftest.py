"""Root conftest — shared test configuration."""

import os
from datetime import timedelta

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("PHASE_RUNNER_ENABLED", "false")

from tests.support import T0, FakeClock  # noqa: E402


@pytest.fixture
def clock():
    """Clock parked one day before T0."""
    return FakeClock(T0 - timedelta(days=1))
