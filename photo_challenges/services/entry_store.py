"""Entry Store — submissions, moderation, and per-participant lookups.

Invariants:
    - An entry is created only while its challenge is ACTIVE
    - At most one entry per (challenge_id, participant_id); the unique constraint decides races,
      the loser gets DuplicateEntry
    - Only approved entries are eligible for votes and the leaderboard
    - Deleting an entry deletes its votes in the same transaction

Design Decisions:
    - Insert-and-translate over check-then-insert: a prior SELECT cannot close the race window
    - Approval on submit is a policy switch (require_approval); default publishes immediately
"""

import logging
from dataclasses import dataclass

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from photo_challenges.core.boundary_protocols import Clock
from photo_challenges.core.domain_types import (
    ChallengeId, EntryId, ModerationAction, ParticipantId, Phase,
)
from photo_challenges.core.errors import (
    ChallengeNotAcceptingEntriesError,
    ChallengeNotFoundError,
    DuplicateEntryError,
    EntryNotFoundError,
    ErrorContext,
)
from photo_challenges.models.challenge import Challenge
from photo_challenges.models.entry import Entry
from photo_challenges.models.vote import Vote

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryMetadata:
    """Optional descriptive fields supplied with a submission."""
    title: str | None = None
    caption: str | None = None
    location: str | None = None
    camera_info: str | None = None


def _entries_with_counts():
    return (
        select(Entry, func.count(Vote.id).label("vote_count"))
        .outerjoin(Vote, Vote.entry_id == Entry.id)
        .group_by(Entry.id)
        .execution_options(populate_existing=True)
    )


class EntryStore:
    """Persistence and moderation for challenge entries."""

    def __init__(self, db: AsyncSession, clock: Clock, require_approval: bool = False):
        self.db = db
        self.clock = clock
        self.require_approval = require_approval

    async def submit(
        self,
        challenge_id: ChallengeId,
        participant_id: ParticipantId,
        image_ref: str,
        metadata: EntryMetadata | None = None,
    ) -> Entry:
        metadata = metadata or EntryMetadata()
        context = ErrorContext(
            challenge_id=str(challenge_id), participant_id=participant_id,
        )
        phase = await self._challenge_phase(challenge_id)
        if phase is None:
            raise ChallengeNotFoundError(str(challenge_id), context)
        if phase != Phase.ACTIVE:
            raise ChallengeNotAcceptingEntriesError(phase.value, context)

        entry = Entry(
            challenge_id=challenge_id,
            participant_id=participant_id,
            image_ref=image_ref,
            title=metadata.title,
            caption=metadata.caption,
            location=metadata.location,
            camera_info=metadata.camera_info,
            is_approved=not self.require_approval,
            created_at=self.clock.now(),
        )
        self.db.add(entry)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            # The FK can fail too if the challenge vanished mid-flight.
            if await self._challenge_phase(challenge_id) is None:
                raise ChallengeNotFoundError(str(challenge_id), context)
            logger.info(
                f"Duplicate entry rejected for participant {participant_id}",
                extra={"challenge_id": str(challenge_id), "error_code": "DUPLICATE_ENTRY"},
            )
            raise DuplicateEntryError(context)

        logger.info(
            f"Entry {entry.id} submitted",
            extra={"challenge_id": str(challenge_id), "entry_id": str(entry.id)},
        )
        return entry

    async def get(self, entry_id: EntryId) -> Entry:
        result = await self.db.execute(
            select(Entry)
            .where(Entry.id == entry_id)
            .execution_options(populate_existing=True)
        )
        entry = result.scalar_one_or_none()
        if entry is None:
            raise EntryNotFoundError(str(entry_id), ErrorContext(entry_id=str(entry_id)))
        return entry

    async def approve(self, entry_id: EntryId) -> Entry:
        return await self._moderate(entry_id, ModerationAction.APPROVE)

    async def reject(self, entry_id: EntryId) -> Entry:
        return await self._moderate(entry_id, ModerationAction.REJECT)

    async def get_participant_entry(
        self, challenge_id: ChallengeId, participant_id: ParticipantId,
    ) -> tuple[Entry, int] | None:
        """The participant's entry in this challenge with its vote count, if any."""
        result = await self.db.execute(
            _entries_with_counts().where(
                Entry.challenge_id == challenge_id,
                Entry.participant_id == participant_id,
            )
        )
        row = result.one_or_none()
        if row is None:
            return None
        return row[0], row[1]

    async def list_approved(self, challenge_id: ChallengeId) -> list[tuple[Entry, int]]:
        """Approved entries of a challenge with vote counts, newest first."""
        result = await self.db.execute(
            _entries_with_counts()
            .where(Entry.challenge_id == challenge_id, Entry.is_approved.is_(True))
            .order_by(Entry.created_at.desc(), Entry.id.desc())
        )
        return [(entry, count) for entry, count in result.all()]

    async def delete(self, entry_id: EntryId) -> None:
        """Remove an entry and its votes (admin)."""
        await self.get(entry_id)
        await self.db.execute(
            delete(Vote)
            .where(Vote.entry_id == entry_id)
            .execution_options(synchronize_session=False),
        )
        await self.db.execute(delete(Entry).where(Entry.id == entry_id))
        await self.db.commit()
        logger.info(f"Entry {entry_id} deleted", extra={"entry_id": str(entry_id)})

    async def _moderate(self, entry_id: EntryId, action: ModerationAction) -> Entry:
        entry = await self.get(entry_id)
        entry.is_approved = action == ModerationAction.APPROVE
        await self.db.commit()
        logger.info(
            f"Entry {entry_id} moderation: {action.value}",
            extra={"entry_id": str(entry_id), "challenge_id": str(entry.challenge_id)},
        )
        return entry

    async def _challenge_phase(self, challenge_id: ChallengeId) -> Phase | None:
        result = await self.db.execute(
            select(Challenge.phase).where(Challenge.id == challenge_id),
        )
        return result.scalar_one_or_none()
