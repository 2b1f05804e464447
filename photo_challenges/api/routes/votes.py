"""Vote Routes — toggle a vote and read the caller's vote status."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from photo_challenges.api.dependencies import (
    get_engine, get_entry_store, get_participant_id, get_vote_ledger,
)
from photo_challenges.schemas.entry import (
    VoteStatusResponse, VoteToggleRequest, VoteToggleResponse,
)
from photo_challenges.services.entry_store import EntryStore
from photo_challenges.services.phase_transitions import PhaseTransitionEngine
from photo_challenges.services.vote_ledger import VoteLedger

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/votes", tags=["votes"])


@router.post("/toggle", response_model=VoteToggleResponse)
async def toggle_vote(
    body: VoteToggleRequest,
    voter_id: str = Depends(get_participant_id),
    engine: PhaseTransitionEngine = Depends(get_engine),
    entries: EntryStore = Depends(get_entry_store),
    ledger: VoteLedger = Depends(get_vote_ledger),
):
    entry = await entries.get(body.entry_id)
    await engine.run([entry.challenge_id])
    result = await ledger.toggle(body.entry_id, voter_id)
    return VoteToggleResponse(voted=result.voted)


@router.get("/status", response_model=VoteStatusResponse)
async def vote_status(
    entry_id: UUID = Query(...),
    voter_id: str = Depends(get_participant_id),
    entries: EntryStore = Depends(get_entry_store),
    ledger: VoteLedger = Depends(get_vote_ledger),
):
    await entries.get(entry_id)
    return VoteStatusResponse(
        entry_id=entry_id,
        voted=await ledger.has_voted(entry_id, voter_id),
        vote_count=await ledger.count_for(entry_id),
    )
