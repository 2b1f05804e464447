"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ChallengeId and EntryId wrap UUIDs; service signatures use them, not bare UUID
    - ParticipantId is opaque: whatever the upstream auth system hands us
    - WinnerPlace is bounded 1–3
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

ChallengeId = NewType("ChallengeId", UUID)
EntryId = NewType("EntryId", UUID)
ParticipantId = NewType("ParticipantId", str)


# ─── Value Types ─────────────────────────────────────────────────

WinnerPlace = NewType("WinnerPlace", int)   # 1–3

WINNER_PLACES: tuple[int, ...] = (1, 2, 3)


# ─── Enums ───────────────────────────────────────────────────────

class Phase(str, Enum):
    """Challenge lifecycle phases, traversed strictly in declaration order."""
    UPCOMING = "UPCOMING"
    ACTIVE = "ACTIVE"
    VOTING = "VOTING"
    COMPLETED = "COMPLETED"


class ModerationAction(str, Enum):
    """Administrative moderation decisions on an entry."""
    APPROVE = "approve"
    REJECT = "reject"
