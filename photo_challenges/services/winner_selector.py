"""Winner Selector — stamps up to three placed entries on a completed challenge.

Invariants:
    - Only valid once the challenge is COMPLETED
    - Every supplied id must be an entry of that challenge (EntryNotInChallenge)
    - Re-running overwrites: previous annotations are cleared before stamping
    - First place is also featured
    - Clear + stamp happen in one transaction
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from photo_challenges.core.domain_types import ChallengeId, EntryId, Phase
from photo_challenges.core.errors import (
    ChallengeNotFoundError,
    ErrorContext,
    WinnersNotAllowedError,
)
from photo_challenges.core.winner_rules import check_membership, plan_placements
from photo_challenges.models.challenge import Challenge
from photo_challenges.models.entry import Entry

logger = logging.getLogger(__name__)


class WinnerSelector:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def select_winners(
        self,
        challenge_id: ChallengeId,
        first: EntryId,
        second: EntryId | None = None,
        third: EntryId | None = None,
    ) -> list[Entry]:
        context = ErrorContext(challenge_id=str(challenge_id))
        result = await self.db.execute(
            select(Challenge.phase).where(Challenge.id == challenge_id),
        )
        phase = result.scalar_one_or_none()
        if phase is None:
            raise ChallengeNotFoundError(str(challenge_id), context)
        if phase != Phase.COMPLETED:
            raise WinnersNotAllowedError(phase.value, context)

        placements = plan_placements(first, second, third)
        owned = await self.db.execute(
            select(Entry.id).where(
                Entry.challenge_id == challenge_id,
                Entry.id.in_(list(placements)),
            )
        )
        check_membership(placements, set(owned.scalars().all()))

        await self.db.execute(
            update(Entry)
            .where(Entry.challenge_id == challenge_id)
            .values(is_winner=False, winner_place=None, is_featured=False)
            .execution_options(synchronize_session="fetch")
        )
        for entry_id, place in placements.items():
            await self.db.execute(
                update(Entry)
                .where(Entry.id == entry_id)
                .values(is_winner=True, winner_place=place, is_featured=place == 1)
                .execution_options(synchronize_session="fetch")
            )
        await self.db.commit()

        logger.info(
            f"Winners selected for challenge {challenge_id}",
            extra={"challenge_id": str(challenge_id)},
        )
        winners = await self.db.execute(
            select(Entry)
            .where(Entry.challenge_id == challenge_id, Entry.is_winner.is_(True))
            .order_by(Entry.winner_place.asc())
            .execution_options(populate_existing=True)
        )
        return list(winners.scalars().all())
