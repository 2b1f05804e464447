"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Time is read only through Clock; nothing in services calls datetime.now() directly
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
"""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from photo_challenges.core.domain_types import Phase


class Clock(Protocol):
    """Wall-clock source. Must return timezone-aware UTC datetimes."""
    def now(self) -> datetime: ...


class ChallengeLike(Protocol):
    """Structural contract for challenge objects fed to the phase machine.

    Avoids coupling the transition engine to the ORM model while giving
    mypy real type information (unlike Any).
    """
    id: UUID
    phase: Phase
    start_date: datetime
    end_date: datetime
    voting_end: datetime
