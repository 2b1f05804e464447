"""Challenge ORM — persists the aggregate root of a photo contest.

Invariants:
    - id is UUID primary key
    - slug is unique (public URL key)
    - start_date < end_date < voting_end (phase machine before insert, CHECK constraint after)
    - phase only moves forward, one step at a time, via compare-and-set updates

Design Decisions:
    - Enum column stored as string (native_enum=False): portable across PostgreSQL and SQLite
    - cascade delete for entries: challenge owns all its entries (ORM + ON DELETE CASCADE)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, Boolean, DateTime, Enum, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from photo_challenges.core.domain_types import Phase
from photo_challenges.db.base import Base


class Challenge(Base):
    """Photo challenge — time-boxed contest with an ordered phase."""
    __tablename__ = "photo_challenges"
    __table_args__ = (
        Index("ix_photo_challenges_phase_start", "phase", "start_date"),
        CheckConstraint(
            "start_date < end_date AND end_date < voting_end",
            name="ck_photo_challenges_window_order",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    theme: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    rules: Mapped[str | None] = mapped_column(Text, nullable=True)
    prize_info: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    end_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    voting_end: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    phase: Mapped[Phase] = mapped_column(
        Enum(Phase, native_enum=False, length=20, name="challenge_phase"),
        nullable=False, default=Phase.UPCOMING,
    )
    featured: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    entries: Mapped[list["Entry"]] = relationship(
        "Entry", back_populates="challenge",
        cascade="all, delete-orphan", passive_deletes=True,
    )
