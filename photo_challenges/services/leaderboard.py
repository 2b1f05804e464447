"""Leaderboard Calculator — ranked view of a challenge's approved entries.

Invariants:
    - Reads only approved entries
    - Counts come from an outer join + GROUP BY over the vote ledger (zero-vote entries included)
    - Ranking and tie-breaks delegated to core/leaderboard.rank_entries
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from photo_challenges.core.domain_types import ChallengeId
from photo_challenges.core.errors import ChallengeNotFoundError
from photo_challenges.core.leaderboard import RankedEntry, rank_entries
from photo_challenges.models.challenge import Challenge
from photo_challenges.models.entry import Entry
from photo_challenges.models.vote import Vote


class LeaderboardCalculator:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def rank(self, challenge_id: ChallengeId, limit: int = 10) -> list[RankedEntry]:
        exists = await self.db.execute(
            select(Challenge.id).where(Challenge.id == challenge_id),
        )
        if exists.scalar_one_or_none() is None:
            raise ChallengeNotFoundError(str(challenge_id))

        vote_count = func.count(Vote.id).label("vote_count")
        result = await self.db.execute(
            select(Entry, vote_count)
            .outerjoin(Vote, Vote.entry_id == Entry.id)
            .where(Entry.challenge_id == challenge_id, Entry.is_approved.is_(True))
            .group_by(Entry.id)
            .order_by(vote_count.desc(), Entry.created_at.asc(), Entry.id.asc())
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return rank_entries(result.all(), limit)
