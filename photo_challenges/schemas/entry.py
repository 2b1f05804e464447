"""Entry & Vote Schemas — submission, moderation output and vote toggle payloads."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EntryCreate(BaseModel):
    """Participant submission. The participant id comes from the auth header, not the body."""
    challenge_id: UUID
    image_ref: str = Field(min_length=1, max_length=2000)
    title: str | None = Field(None, max_length=200)
    caption: str | None = Field(None, max_length=2000)
    location: str | None = Field(None, max_length=200)
    camera_info: str | None = Field(None, max_length=200)

    @field_validator("image_ref")
    @classmethod
    def strip_image_ref(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("image_ref cannot be empty or whitespace")
        return v

    @field_validator("title", "caption", "location", "camera_info")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None


class EntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    challenge_id: UUID
    participant_id: str
    image_ref: str
    title: str | None = None
    caption: str | None = None
    location: str | None = None
    camera_info: str | None = None
    is_approved: bool
    is_winner: bool
    winner_place: int | None = None
    is_featured: bool
    created_at: datetime


class ParticipantEntryResponse(BaseModel):
    entry: EntryResponse
    vote_count: int


class VoteToggleRequest(BaseModel):
    entry_id: UUID


class VoteToggleResponse(BaseModel):
    voted: bool


class VoteStatusResponse(BaseModel):
    entry_id: UUID
    voted: bool
    vote_count: int
