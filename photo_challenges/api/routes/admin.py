"""Admin Routes — challenge management, moderation, winner selection, manual engine run.

Invariants:
    - Every route requires X-Admin-Token (router-level dependency)
    - PATCH never sets a phase directly: it advances by exactly one step or fails
      with IllegalTransition, after the engine has caught the challenge up with the clock
    - DELETE cascades entries and votes
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from photo_challenges.api.dependencies import (
    get_challenge_store, get_engine, get_entry_store, get_winner_selector,
    require_admin,
)
from photo_challenges.schemas.challenge import (
    ChallengeCreate, ChallengeResponse, ChallengeUpdate, WinnerSelection,
    challenge_response,
)
from photo_challenges.schemas.entry import EntryResponse
from photo_challenges.services.challenge_store import ChallengeStore
from photo_challenges.services.entry_store import EntryStore
from photo_challenges.services.phase_transitions import PhaseTransitionEngine
from photo_challenges.services.winner_selector import WinnerSelector

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/v1/admin", tags=["admin"], dependencies=[Depends(require_admin)],
)


# ─── Challenges ──────────────────────────────────────────────────

@router.post(
    "/challenges", response_model=ChallengeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_challenge(
    body: ChallengeCreate, store: ChallengeStore = Depends(get_challenge_store),
):
    challenge = await store.create(
        title=body.title,
        slug=body.slug,
        theme=body.theme,
        description=body.description,
        rules=body.rules,
        prize_info=body.prize_info,
        start_date=body.start_date,
        end_date=body.end_date,
        voting_end=body.voting_end,
        featured=body.featured,
    )
    return challenge_response(challenge, 0)


@router.get("/challenges", response_model=list[ChallengeResponse])
async def list_challenges(
    engine: PhaseTransitionEngine = Depends(get_engine),
    store: ChallengeStore = Depends(get_challenge_store),
):
    await engine.run()
    return [
        challenge_response(challenge, count)
        for challenge, count in await store.list_all()
    ]


@router.patch("/challenges/{challenge_id}", response_model=ChallengeResponse)
async def update_challenge(
    challenge_id: UUID,
    body: ChallengeUpdate,
    engine: PhaseTransitionEngine = Depends(get_engine),
    store: ChallengeStore = Depends(get_challenge_store),
):
    await engine.run([challenge_id])
    challenge = await store.update(
        challenge_id, phase=body.phase, featured=body.featured,
    )
    return challenge_response(challenge)


@router.delete("/challenges/{challenge_id}")
async def delete_challenge(
    challenge_id: UUID, store: ChallengeStore = Depends(get_challenge_store),
):
    await store.delete(challenge_id)
    return {"success": True}


@router.post("/challenges/{challenge_id}/winners", response_model=list[EntryResponse])
async def select_winners(
    challenge_id: UUID,
    body: WinnerSelection,
    engine: PhaseTransitionEngine = Depends(get_engine),
    selector: WinnerSelector = Depends(get_winner_selector),
):
    await engine.run([challenge_id])
    winners = await selector.select_winners(
        challenge_id, body.first, body.second, body.third,
    )
    return [EntryResponse.model_validate(entry) for entry in winners]


# ─── Entries ─────────────────────────────────────────────────────

@router.post("/entries/{entry_id}/approve", response_model=EntryResponse)
async def approve_entry(
    entry_id: UUID, entries: EntryStore = Depends(get_entry_store),
):
    return EntryResponse.model_validate(await entries.approve(entry_id))


@router.post("/entries/{entry_id}/reject", response_model=EntryResponse)
async def reject_entry(
    entry_id: UUID, entries: EntryStore = Depends(get_entry_store),
):
    return EntryResponse.model_validate(await entries.reject(entry_id))


@router.delete("/entries/{entry_id}")
async def delete_entry(
    entry_id: UUID, entries: EntryStore = Depends(get_entry_store),
):
    await entries.delete(entry_id)
    return {"success": True}


# ─── Phase engine ────────────────────────────────────────────────

@router.post("/phases/run")
async def run_phase_engine(engine: PhaseTransitionEngine = Depends(get_engine)):
    """Run the transition engine now (same work the background runner does)."""
    report = await engine.run()
    return report.to_dict()
