"""Shared test helpers — fixed instants, a controllable clock, request headers."""

from datetime import datetime, timedelta, timezone

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
ADMIN_TOKEN = "test-admin-token"


class FakeClock:
    """Clock whose time only moves when a test says so."""

    def __init__(self, now: datetime):
        self._now = now

    def now(self) -> datetime:
        return self._now

    def set(self, now: datetime) -> None:
        self._now = now

    def advance(self, **kwargs) -> None:
        self._now = self._now + timedelta(**kwargs)


def participant(participant_id: str) -> dict:
    return {"X-Participant-Id": participant_id}
