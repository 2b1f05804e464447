"""System Clock — production implementation of the core Clock protocol."""

from datetime import datetime, timezone


class SystemClock:
    """Reads the process wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


system_clock = SystemClock()


def get_clock() -> SystemClock:
    """FastAPI dependency — overridden in tests with a controllable clock."""
    return system_clock
