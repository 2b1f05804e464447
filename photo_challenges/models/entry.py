"""Entry ORM — one participant's single submission to a challenge.

Invariants:
    - Always belongs to a Challenge (challenge_id FK, ON DELETE CASCADE)
    - Unique on (challenge_id, participant_id): the DB constraint is the race arbiter
    - winner_place is NULL or 1–3; is_winner mirrors winner_place IS NOT NULL

Design Decisions:
    - participant_id is an opaque string: identities live in the external auth system
    - cascade delete for votes: entry owns its ledger rows
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    String, Text, Boolean, Integer, DateTime, ForeignKey,
    UniqueConstraint, CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from photo_challenges.db.base import Base


class Entry(Base):
    """Challenge entry — an image plus optional metadata."""
    __tablename__ = "challenge_entries"
    __table_args__ = (
        UniqueConstraint(
            "challenge_id", "participant_id",
            name="uq_challenge_entries_challenge_participant",
        ),
        CheckConstraint(
            "winner_place IS NULL OR winner_place BETWEEN 1 AND 3",
            name="ck_challenge_entries_winner_place",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    challenge_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("photo_challenges.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    participant_id: Mapped[str] = mapped_column(String(100), nullable=False)
    image_ref: Mapped[str] = mapped_column(String(2000), nullable=False)
    title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    caption: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    camera_info: Mapped[str | None] = mapped_column(String(200), nullable=True)
    is_approved: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    is_winner: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    winner_place: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_featured: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    challenge: Mapped["Challenge"] = relationship(
        "Challenge", back_populates="entries",
    )
    votes: Mapped[list["Vote"]] = relationship(
        "Vote", back_populates="entry",
        cascade="all, delete-orphan", passive_deletes=True,
    )
