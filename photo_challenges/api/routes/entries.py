"""Entry Routes — participant submission and own-entry lookup.

Invariants:
    - Participant identity comes from X-Participant-Id, never from the body
    - The challenge is advanced to its current phase before the ACTIVE check
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from photo_challenges.api.dependencies import (
    get_engine, get_entry_store, get_participant_id,
)
from photo_challenges.schemas.entry import (
    EntryCreate, EntryResponse, ParticipantEntryResponse,
)
from photo_challenges.services.entry_store import EntryMetadata, EntryStore
from photo_challenges.services.phase_transitions import PhaseTransitionEngine

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/entries", tags=["entries"])


@router.post("", response_model=EntryResponse, status_code=status.HTTP_201_CREATED)
async def submit_entry(
    body: EntryCreate,
    participant_id: str = Depends(get_participant_id),
    engine: PhaseTransitionEngine = Depends(get_engine),
    entries: EntryStore = Depends(get_entry_store),
):
    await engine.run([body.challenge_id])
    entry = await entries.submit(
        body.challenge_id,
        participant_id,
        body.image_ref,
        EntryMetadata(
            title=body.title,
            caption=body.caption,
            location=body.location,
            camera_info=body.camera_info,
        ),
    )
    return EntryResponse.model_validate(entry)


@router.get("/mine", response_model=ParticipantEntryResponse)
async def get_my_entry(
    challenge_id: UUID = Query(...),
    participant_id: str = Depends(get_participant_id),
    entries: EntryStore = Depends(get_entry_store),
):
    found = await entries.get_participant_entry(challenge_id, participant_id)
    if found is None:
        raise HTTPException(
            status.HTTP_404_NOT_FOUND,
            detail="You have not entered this challenge",
        )
    entry, vote_count = found
    return ParticipantEntryResponse(
        entry=EntryResponse.model_validate(entry), vote_count=vote_count,
    )
