"""Challenge Store — create, read, list, re-phase and delete photo challenges.

Invariants:
    - create() rejects windows that are not start < end < voting_end (InvalidWindow)
    - Initial phase is UPCOMING for future starts, ACTIVE for back-dated ones
    - set_phase() only accepts the immediate successor (IllegalTransition otherwise)
    - delete() removes votes, entries and the challenge in one transaction
    - Slug uniqueness is enforced by the DB constraint, not a prior lookup

Design Decisions:
    - Listings return (challenge, entry_count) pairs: counts come from GROUP BY, never stored
    - update() applies featured and a phase move in one commit; phase never set directly
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy import delete, func, or_, and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from photo_challenges.core.boundary_protocols import Clock
from photo_challenges.core.domain_types import ChallengeId, Phase
from photo_challenges.core.errors import (
    ChallengeNotFoundError,
    DuplicateSlugError,
    ErrorContext,
    IllegalTransitionError,
)
from photo_challenges.core.phase_machine import (
    initial_phase, make_boundaries, validate_transition,
)
from photo_challenges.models.challenge import Challenge
from photo_challenges.models.entry import Entry
from photo_challenges.models.vote import Vote
from photo_challenges.services.phase_transitions import (
    compare_and_set_phase, current_phase,
)

logger = logging.getLogger(__name__)


def _entry_count_query():
    return (
        select(Challenge, func.count(Entry.id).label("entry_count"))
        .outerjoin(Entry, Entry.challenge_id == Challenge.id)
        .group_by(Challenge.id)
        .execution_options(populate_existing=True)
    )


class ChallengeStore:
    """Persistence and lifecycle commands for challenges."""

    def __init__(self, db: AsyncSession, clock: Clock, upcoming_lead_days: int = 7):
        self.db = db
        self.clock = clock
        self.upcoming_lead = timedelta(days=upcoming_lead_days)

    async def create(
        self,
        *,
        title: str,
        slug: str,
        theme: str,
        description: str,
        start_date: datetime,
        end_date: datetime,
        voting_end: datetime,
        rules: str | None = None,
        prize_info: str | None = None,
        featured: bool = False,
    ) -> Challenge:
        boundaries = make_boundaries(start_date, end_date, voting_end)
        now = self.clock.now()
        challenge = Challenge(
            title=title,
            slug=slug,
            theme=theme,
            description=description,
            rules=rules,
            prize_info=prize_info,
            start_date=boundaries.start_date,
            end_date=boundaries.end_date,
            voting_end=boundaries.voting_end,
            phase=initial_phase(boundaries, now),
            featured=featured,
            created_at=now,
        )
        self.db.add(challenge)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateSlugError(slug)
        logger.info(
            f"Challenge '{slug}' created in {challenge.phase.value}",
            extra={"challenge_id": str(challenge.id), "phase": challenge.phase.value},
        )
        return challenge

    async def get(self, challenge_id: ChallengeId) -> Challenge:
        result = await self.db.execute(
            select(Challenge)
            .where(Challenge.id == challenge_id)
            .execution_options(populate_existing=True),
        )
        challenge = result.scalar_one_or_none()
        if challenge is None:
            raise ChallengeNotFoundError(
                str(challenge_id), ErrorContext(challenge_id=str(challenge_id)),
            )
        return challenge

    async def get_by_slug(self, slug: str) -> Challenge:
        result = await self.db.execute(
            select(Challenge)
            .where(Challenge.slug == slug)
            .execution_options(populate_existing=True),
        )
        challenge = result.scalar_one_or_none()
        if challenge is None:
            raise ChallengeNotFoundError(slug)
        return challenge

    async def list_active(self) -> list[tuple[Challenge, int]]:
        """UPCOMING within the lead window, ACTIVE and VOTING; earliest start first."""
        horizon = self.clock.now() + self.upcoming_lead
        query = (
            _entry_count_query()
            .where(
                or_(
                    Challenge.phase.in_([Phase.ACTIVE, Phase.VOTING]),
                    and_(
                        Challenge.phase == Phase.UPCOMING,
                        Challenge.start_date <= horizon,
                    ),
                )
            )
            .order_by(Challenge.start_date.asc(), Challenge.id.asc())
        )
        result = await self.db.execute(query)
        return [(challenge, count) for challenge, count in result.all()]

    async def list_all(self) -> list[tuple[Challenge, int]]:
        """Every challenge, newest first (admin view)."""
        query = _entry_count_query().order_by(Challenge.created_at.desc())
        result = await self.db.execute(query)
        return [(challenge, count) for challenge, count in result.all()]

    async def set_phase(self, challenge_id: ChallengeId, phase: Phase) -> Challenge:
        """Move to the immediate successor phase; anything else is IllegalTransition."""
        challenge = await self.get(challenge_id)
        source = challenge.phase
        validate_transition(source, phase)
        if not await compare_and_set_phase(self.db, challenge_id, source, phase):
            await self.db.rollback()
            observed = await current_phase(self.db, challenge_id)
            raise IllegalTransitionError(
                (observed or source).value, phase.value,
                ErrorContext(challenge_id=str(challenge_id)),
            )
        await self.db.commit()
        await self.db.refresh(challenge)
        logger.info(
            f"Challenge {challenge_id} set {source.value} -> {phase.value}",
            extra={
                "challenge_id": str(challenge_id),
                "from_phase": source.value,
                "to_phase": phase.value,
            },
        )
        return challenge

    async def update(
        self,
        challenge_id: ChallengeId,
        *,
        phase: Phase | None = None,
        featured: bool | None = None,
    ) -> Challenge:
        """Admin edit: featured flag, plus an optional single-step phase override.

        All or nothing: a rejected phase override leaves the featured flag untouched.
        """
        challenge = await self.get(challenge_id)
        moves_phase = phase is not None and phase != challenge.phase
        if moves_phase:
            validate_transition(challenge.phase, phase)
        if featured is not None:
            challenge.featured = featured
        if moves_phase:
            # set_phase commits the featured edit with the phase, or rolls both back
            return await self.set_phase(challenge_id, phase)
        await self.db.commit()
        return challenge

    async def delete(self, challenge_id: ChallengeId) -> None:
        """Delete a challenge together with its entries and their votes."""
        await self.get(challenge_id)
        entry_ids = select(Entry.id).where(Entry.challenge_id == challenge_id)
        await self.db.execute(
            delete(Vote)
            .where(Vote.entry_id.in_(entry_ids))
            .execution_options(synchronize_session=False),
        )
        await self.db.execute(
            delete(Entry)
            .where(Entry.challenge_id == challenge_id)
            .execution_options(synchronize_session=False),
        )
        await self.db.execute(
            delete(Challenge).where(Challenge.id == challenge_id),
        )
        await self.db.commit()
        logger.info(
            f"Challenge {challenge_id} deleted",
            extra={"challenge_id": str(challenge_id)},
        )
