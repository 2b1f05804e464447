"""Phase Machine — explicit state machine for the challenge lifecycle.

States: UPCOMING → ACTIVE → VOTING → COMPLETED (terminal).

Invariants:
    - All functions are PURE: no IO, no async, no DB, no clock reads
    - Transitions only move forward by exactly one step
    - A phase is entered when `now >= boundary` for that phase
    - advance() loops until no rule applies, so one late run reaches the
      phase consistent with `now` (no permanent stall)

Design Decisions:
    - Transition table + boundary map over scattered date comparisons:
      illegal jumps are structurally impossible and the rules are testable
      with plain datetimes (no wall-clock mocking)
    - Naive datetimes are treated as UTC: SQLite hands back naive values
      for timezone-aware columns
"""

from dataclasses import dataclass
from datetime import datetime, timezone

from photo_challenges.core.domain_types import Phase
from photo_challenges.core.errors import IllegalTransitionError, InvalidWindowError


NEXT_PHASE: dict[Phase, Phase | None] = {
    Phase.UPCOMING: Phase.ACTIVE,
    Phase.ACTIVE: Phase.VOTING,
    Phase.VOTING: Phase.COMPLETED,
    Phase.COMPLETED: None,
}


@dataclass(frozen=True)
class PhaseBoundaries:
    """The three ordered instants that drive a challenge through its phases."""
    start_date: datetime
    end_date: datetime
    voting_end: datetime

    def __post_init__(self):
        for name in ("start_date", "end_date", "voting_end"):
            object.__setattr__(self, name, ensure_utc(getattr(self, name)))

    def entry_time(self, phase: Phase) -> datetime | None:
        """Instant at which `phase` begins; UPCOMING has none."""
        if phase == Phase.ACTIVE:
            return self.start_date
        if phase == Phase.VOTING:
            return self.end_date
        if phase == Phase.COMPLETED:
            return self.voting_end
        return None


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def make_boundaries(
    start_date: datetime, end_date: datetime, voting_end: datetime,
) -> PhaseBoundaries:
    """Build boundaries, rejecting windows that are not strictly ordered."""
    boundaries = PhaseBoundaries(start_date, end_date, voting_end)
    if not (boundaries.start_date < boundaries.end_date < boundaries.voting_end):
        raise InvalidWindowError()
    return boundaries


def initial_phase(boundaries: PhaseBoundaries, now: datetime) -> Phase:
    """Phase a freshly created challenge starts in.

    Back-dated challenges start ACTIVE; the transition engine carries them
    further on its next run.
    """
    if boundaries.start_date > ensure_utc(now):
        return Phase.UPCOMING
    return Phase.ACTIVE


def can_transition(current: Phase, target: Phase) -> bool:
    """True only when `target` is the immediate successor of `current`."""
    return NEXT_PHASE.get(current) == target


def validate_transition(current: Phase, target: Phase) -> None:
    """Raise IllegalTransitionError unless current → target is a single forward step."""
    if not can_transition(current, target):
        raise IllegalTransitionError(current.value, target.value)


def next_due(
    phase: Phase, boundaries: PhaseBoundaries, now: datetime,
) -> Phase | None:
    """The successor phase if its boundary has been reached, else None."""
    target = NEXT_PHASE.get(phase)
    if target is None:
        return None
    if ensure_utc(now) >= boundaries.entry_time(target):
        return target
    return None


def advance(
    phase: Phase, boundaries: PhaseBoundaries, now: datetime,
) -> list[Phase]:
    """Every phase a challenge must pass through to become consistent with `now`.

    Returns the hops in order (possibly empty). Re-running on an already
    consistent phase returns [].
    """
    hops: list[Phase] = []
    current = phase
    while (target := next_due(current, boundaries, now)) is not None:
        hops.append(target)
        current = target
    return hops


def phase_at(boundaries: PhaseBoundaries, now: datetime) -> Phase:
    """Phase consistent with `now`, starting from UPCOMING."""
    hops = advance(Phase.UPCOMING, boundaries, now)
    return hops[-1] if hops else Phase.UPCOMING
