"""Challenge Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - ChallengeCreate strips text fields and requires a URL-safe slug
    - Window ordering is NOT validated here: the phase machine owns that rule (InvalidWindow)
    - Naive datetimes from clients are interpreted as UTC

Design Decisions:
    - from_attributes responses: built straight from ORM rows
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from photo_challenges.core.domain_types import Phase
from photo_challenges.core.phase_machine import ensure_utc
from photo_challenges.schemas.entry import EntryResponse


class ChallengeCreate(BaseModel):
    """Admin challenge creation."""
    title: str = Field(min_length=1, max_length=200)
    slug: str = Field(min_length=1, max_length=200, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    theme: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=10_000)
    rules: str | None = Field(None, max_length=10_000)
    prize_info: str | None = Field(None, max_length=2000)
    start_date: datetime
    end_date: datetime
    voting_end: datetime
    featured: bool = False

    @field_validator("title", "theme", "description")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty or whitespace")
        return v

    @field_validator("start_date", "end_date", "voting_end")
    @classmethod
    def as_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class ChallengeUpdate(BaseModel):
    """Admin PATCH: single-step phase override and/or featured flag."""
    phase: Phase | None = None
    featured: bool | None = None


class ChallengeResponse(BaseModel):
    """Public-facing challenge data."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    slug: str
    theme: str
    description: str
    rules: str | None = None
    prize_info: str | None = None
    start_date: datetime
    end_date: datetime
    voting_end: datetime
    phase: Phase
    featured: bool
    created_at: datetime
    entry_count: int | None = None


class EntryWithVotes(BaseModel):
    entry: EntryResponse
    vote_count: int


class ChallengeDetail(BaseModel):
    """Challenge page: challenge plus its approved entries."""
    challenge: ChallengeResponse
    entries: list[EntryWithVotes]


class LeaderboardRow(BaseModel):
    rank: int = Field(ge=1)
    entry: EntryResponse
    vote_count: int = Field(ge=0)


class WinnerSelection(BaseModel):
    """Admin winner selection — first place mandatory."""
    first: UUID
    second: UUID | None = None
    third: UUID | None = None


def challenge_response(challenge, entry_count: int | None = None) -> ChallengeResponse:
    response = ChallengeResponse.model_validate(challenge)
    response.entry_count = entry_count
    return response
