"""Vote ORM — one voter's endorsement of one entry.

Invariants:
    - Unique on (entry_id, voter_id): never two rows for the same pair
    - Rows are only inserted or deleted (toggle); never updated in place

Design Decisions:
    - No denormalized counter on Entry: vote count is always a GROUP BY over this table
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from photo_challenges.db.base import Base


class Vote(Base):
    """Vote ledger row."""
    __tablename__ = "challenge_votes"
    __table_args__ = (
        UniqueConstraint(
            "entry_id", "voter_id", name="uq_challenge_votes_entry_voter",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    entry_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("challenge_entries.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    voter_id: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    entry: Mapped["Entry"] = relationship("Entry", back_populates="votes")
