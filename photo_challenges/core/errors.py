"""Error Hierarchy — typed, categorized exceptions for every challenge-engine failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (4xx) are expected outcomes of caller input or a lost race, never defects
    - Infrastructure errors (5xx) surface storage failures unchanged; callers retry the operation
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with ChallengeEngineError base: FastAPI global handler catches all
      (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    AUTHORIZATION = "authorization"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    challenge_id: str | None = None
    entry_id: str | None = None
    participant_id: str | None = None
    debug_info: dict[str, Any] | None = None


class ChallengeEngineError(Exception):
    """Base exception for all challenge-engine errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "challenge_id": self.context.challenge_id,
                    "entry_id": self.context.entry_id,
                },
            }
        }


# ─── Challenge Store ─────────────────────────────────────────────

class InvalidWindowError(ChallengeEngineError):
    """Time boundaries are not strictly ordered start < end < voting_end."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Challenge dates must satisfy start_date < end_date < voting_end.",
            "INVALID_WINDOW", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class DuplicateSlugError(ChallengeEngineError):
    """Another challenge already owns this slug."""
    def __init__(self, slug: str, context: ErrorContext | None = None):
        super().__init__(
            f"A challenge with slug '{slug}' already exists.",
            "DUPLICATE_SLUG", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.slug = slug


class ChallengeNotFoundError(ChallengeEngineError):
    """Requested challenge does not exist."""
    def __init__(self, challenge_ref: str, context: ErrorContext | None = None):
        super().__init__(
            f"Challenge '{challenge_ref}' not found",
            "CHALLENGE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class IllegalTransitionError(ChallengeEngineError):
    """Target phase is not the immediate successor of the current phase."""
    def __init__(self, current: str, target: str, context: ErrorContext | None = None):
        super().__init__(
            f"Cannot move challenge from {current} to {target}.",
            "ILLEGAL_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )
        self.current = current
        self.target = target


# ─── Entry Store ─────────────────────────────────────────────────

class ChallengeNotAcceptingEntriesError(ChallengeEngineError):
    """Entries are only accepted while the challenge is ACTIVE."""
    def __init__(self, phase: str, context: ErrorContext | None = None):
        super().__init__(
            f"Challenge is not accepting entries (phase: {phase}).",
            "CHALLENGE_NOT_ACCEPTING_ENTRIES", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )
        self.phase = phase


class DuplicateEntryError(ChallengeEngineError):
    """Participant already holds an entry in this challenge."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "You have already entered this challenge.",
            "DUPLICATE_ENTRY", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class EntryNotFoundError(ChallengeEngineError):
    """Entry does not exist (or is not approved, where approval is required)."""
    def __init__(self, entry_id: str, context: ErrorContext | None = None):
        super().__init__(
            f"Entry '{entry_id}' not found",
            "ENTRY_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Vote Ledger ─────────────────────────────────────────────────

class VotingClosedError(ChallengeEngineError):
    """Votes are only accepted while the challenge is in VOTING."""
    def __init__(self, phase: str, context: ErrorContext | None = None):
        super().__init__(
            f"Voting is not open for this challenge (phase: {phase}).",
            "VOTING_CLOSED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )
        self.phase = phase


class SelfVoteForbiddenError(ChallengeEngineError):
    """Participants may not vote for their own entry."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "You cannot vote for your own entry.",
            "SELF_VOTE_FORBIDDEN", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 403,
        )


# ─── Winner Selector ─────────────────────────────────────────────

class WinnersNotAllowedError(ChallengeEngineError):
    """Winners can only be selected once the challenge is COMPLETED."""
    def __init__(self, phase: str, context: ErrorContext | None = None):
        super().__init__(
            f"Winners can only be selected for completed challenges (phase: {phase}).",
            "WINNERS_NOT_ALLOWED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )


class EntryNotInChallengeError(ChallengeEngineError):
    """A supplied winner id is not an entry of the target challenge."""
    def __init__(self, entry_ids: list[str], context: ErrorContext | None = None):
        super().__init__(
            f"Entries do not belong to this challenge: {', '.join(entry_ids)}",
            "ENTRY_NOT_IN_CHALLENGE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.entry_ids = entry_ids


class InvalidWinnerSelectionError(ChallengeEngineError):
    """The same entry was supplied for more than one place."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_WINNER_SELECTION", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


# ─── Caller identity ─────────────────────────────────────────────

class ParticipantRequiredError(ChallengeEngineError):
    """Request carries no verified participant identity."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "A verified participant identity is required.",
            "PARTICIPANT_REQUIRED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 401,
        )


class AdminRequiredError(ChallengeEngineError):
    """Administrative operation attempted without admin credentials."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Administrator access required.",
            "ADMIN_REQUIRED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(ChallengeEngineError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
