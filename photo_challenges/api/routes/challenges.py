"""Public Challenge Routes — active listing, detail by slug, and leaderboard.

Invariants:
    - Every read runs the transition engine first (lazy advancement), so responses never
      show a phase that time has already superseded
    - Leaderboard limit is 1–100, default 10
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from photo_challenges.api.dependencies import (
    get_challenge_store, get_engine, get_entry_store, get_leaderboard,
)
from photo_challenges.schemas.challenge import (
    ChallengeDetail, ChallengeResponse, EntryWithVotes, LeaderboardRow,
    challenge_response,
)
from photo_challenges.schemas.entry import EntryResponse
from photo_challenges.services.challenge_store import ChallengeStore
from photo_challenges.services.entry_store import EntryStore
from photo_challenges.services.leaderboard import LeaderboardCalculator
from photo_challenges.services.phase_transitions import PhaseTransitionEngine

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/challenges", tags=["challenges"])


@router.get("/active", response_model=list[ChallengeResponse])
async def list_active_challenges(
    engine: PhaseTransitionEngine = Depends(get_engine),
    store: ChallengeStore = Depends(get_challenge_store),
):
    """Upcoming (within the lead window), active and voting challenges."""
    await engine.run()
    return [
        challenge_response(challenge, count)
        for challenge, count in await store.list_active()
    ]


@router.get("/{slug}", response_model=ChallengeDetail)
async def get_challenge(
    slug: str,
    engine: PhaseTransitionEngine = Depends(get_engine),
    store: ChallengeStore = Depends(get_challenge_store),
    entries: EntryStore = Depends(get_entry_store),
):
    challenge = await store.get_by_slug(slug)
    await engine.run([challenge.id])
    challenge = await store.get(challenge.id)
    approved = await entries.list_approved(challenge.id)
    return ChallengeDetail(
        challenge=challenge_response(challenge, len(approved)),
        entries=[
            EntryWithVotes(entry=EntryResponse.model_validate(entry), vote_count=count)
            for entry, count in approved
        ],
    )


@router.get("/{challenge_id}/leaderboard", response_model=list[LeaderboardRow])
async def challenge_leaderboard(
    challenge_id: UUID,
    limit: int = Query(10, ge=1, le=100),
    engine: PhaseTransitionEngine = Depends(get_engine),
    leaderboard: LeaderboardCalculator = Depends(get_leaderboard),
):
    await engine.run([challenge_id])
    ranked = await leaderboard.rank(challenge_id, limit)
    return [
        LeaderboardRow(
            rank=row.rank,
            entry=EntryResponse.model_validate(row.entry),
            vote_count=row.vote_count,
        )
        for row in ranked
    ]
