"""Error hierarchy — codes, HTTP statuses and the REST envelope."""

import pytest

from photo_challenges.core.errors import (
    AdminRequiredError, ChallengeEngineError, ChallengeNotAcceptingEntriesError,
    ChallengeNotFoundError, DatabaseError, DuplicateEntryError, DuplicateSlugError,
    EntryNotFoundError, ErrorCategory, ErrorContext, ErrorSeverity,
    IllegalTransitionError, InvalidWindowError, ParticipantRequiredError,
    SelfVoteForbiddenError, VotingClosedError, WinnersNotAllowedError,
)


@pytest.mark.parametrize("error,code,status", [
    (InvalidWindowError(), "INVALID_WINDOW", 400),
    (DuplicateSlugError("x"), "DUPLICATE_SLUG", 409),
    (ChallengeNotFoundError("x"), "CHALLENGE_NOT_FOUND", 404),
    (IllegalTransitionError("ACTIVE", "UPCOMING"), "ILLEGAL_TRANSITION", 409),
    (ChallengeNotAcceptingEntriesError("VOTING"), "CHALLENGE_NOT_ACCEPTING_ENTRIES", 409),
    (DuplicateEntryError(), "DUPLICATE_ENTRY", 409),
    (EntryNotFoundError("x"), "ENTRY_NOT_FOUND", 404),
    (VotingClosedError("ACTIVE"), "VOTING_CLOSED", 409),
    (SelfVoteForbiddenError(), "SELF_VOTE_FORBIDDEN", 403),
    (WinnersNotAllowedError("VOTING"), "WINNERS_NOT_ALLOWED", 409),
    (ParticipantRequiredError(), "PARTICIPANT_REQUIRED", 401),
    (AdminRequiredError(), "ADMIN_REQUIRED", 403),
    (DatabaseError("boom", "commit"), "DATABASE_ERROR", 503),
])
def test_codes_and_statuses(error, code, status):
    assert isinstance(error, ChallengeEngineError)
    assert error.code == code
    assert error.http_status == status


def test_to_response_envelope():
    err = EntryNotFoundError("e-1", ErrorContext(challenge_id="c-1", entry_id="e-1"))
    body = err.to_response()["error"]
    assert body["code"] == "ENTRY_NOT_FOUND"
    assert body["category"] == ErrorCategory.RESOURCE_NOT_FOUND.value
    assert body["severity"] == ErrorSeverity.ERROR.value
    assert body["context"] == {"challenge_id": "c-1", "entry_id": "e-1"}
    assert "timestamp" in body


def test_database_error_is_critical():
    err = DatabaseError("timeout", "execute")
    assert err.severity == ErrorSeverity.CRITICAL
    assert err.operation == "execute"
    assert "execute" in err.message
