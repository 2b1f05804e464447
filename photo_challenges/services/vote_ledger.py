"""Vote Ledger — one vote per (entry, voter) with toggle semantics.

Invariants:
    - Preconditions checked in order, on every attempt: EntryNotFound → VotingClosed →
      SelfVoteForbidden
    - Toggle is one transaction: conditional DELETE of the pair, else INSERT
    - The (entry_id, voter_id) unique constraint forbids a second row; an INSERT that loses
      a race is rolled back and the toggle re-run, so concurrent identical toggles
      serialize (insert, then delete) instead of duplicating
    - Vote counts are always COUNT(*) over the ledger; nothing is cached

Design Decisions:
    - DELETE-first: its rowcount is the existence check, so no separate SELECT can go stale
"""

import logging
from dataclasses import dataclass

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from photo_challenges.core.boundary_protocols import Clock
from photo_challenges.core.domain_types import EntryId, ParticipantId, Phase
from photo_challenges.core.errors import (
    DatabaseError,
    EntryNotFoundError,
    ErrorContext,
    SelfVoteForbiddenError,
    VotingClosedError,
)
from photo_challenges.models.challenge import Challenge
from photo_challenges.models.entry import Entry
from photo_challenges.models.vote import Vote

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToggleResult:
    voted: bool


class VoteLedger:
    """Toggle and query votes."""

    def __init__(self, db: AsyncSession, clock: Clock, max_attempts: int = 3):
        self.db = db
        self.clock = clock
        self.max_attempts = max_attempts

    async def toggle(self, entry_id: EntryId, voter_id: ParticipantId) -> ToggleResult:
        context = ErrorContext(entry_id=str(entry_id), participant_id=voter_id)
        for attempt in range(1, self.max_attempts + 1):
            # re-checked on every attempt; the window may close between retries
            await self._check_preconditions(entry_id, voter_id, context)
            removed = await self.db.execute(
                delete(Vote)
                .where(Vote.entry_id == entry_id, Vote.voter_id == voter_id)
                .execution_options(synchronize_session=False)
            )
            if removed.rowcount:
                await self.db.commit()
                logger.info(
                    f"Vote removed by {voter_id}",
                    extra={"entry_id": str(entry_id), "participant_id": voter_id},
                )
                return ToggleResult(voted=False)

            self.db.add(Vote(entry_id=entry_id, voter_id=voter_id, created_at=self.clock.now()))
            try:
                await self.db.commit()
            except IntegrityError:
                # A concurrent toggle inserted the same pair first; re-run against it.
                await self.db.rollback()
                logger.warning(
                    f"Vote toggle lost insert race (attempt {attempt})",
                    extra={"entry_id": str(entry_id), "participant_id": voter_id},
                )
                continue
            logger.info(
                f"Vote cast by {voter_id}",
                extra={"entry_id": str(entry_id), "participant_id": voter_id},
            )
            return ToggleResult(voted=True)

        raise DatabaseError(
            f"gave up after {self.max_attempts} conflicting attempts", "vote toggle", context,
        )

    async def _check_preconditions(
        self, entry_id: EntryId, voter_id: ParticipantId, context: ErrorContext,
    ) -> None:
        result = await self.db.execute(
            select(Entry.participant_id, Entry.is_approved, Challenge.phase)
            .join(Challenge, Challenge.id == Entry.challenge_id)
            .where(Entry.id == entry_id)
        )
        row = result.one_or_none()
        if row is None or not row.is_approved:
            raise EntryNotFoundError(str(entry_id), context)
        if row.phase != Phase.VOTING:
            raise VotingClosedError(row.phase.value, context)
        if row.participant_id == voter_id:
            raise SelfVoteForbiddenError(context)

    async def count_for(self, entry_id: EntryId) -> int:
        result = await self.db.execute(
            select(func.count(Vote.id)).where(Vote.entry_id == entry_id),
        )
        return result.scalar_one()

    async def has_voted(self, entry_id: EntryId, voter_id: ParticipantId) -> bool:
        result = await self.db.execute(
            select(Vote.id).where(Vote.entry_id == entry_id, Vote.voter_id == voter_id),
        )
        return result.scalar_one_or_none() is not None
