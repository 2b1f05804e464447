"""Request Dependencies — caller identity, admin gate, and service construction.

Invariants:
    - Participant identity is the opaque X-Participant-Id header set by the upstream auth proxy
    - Admin routes require X-Admin-Token equal to settings.admin_token (constant-time compare)
    - Services get the request session and the injected clock; nothing is process-global

Design Decisions:
    - Header identity over cookies/JWT: authentication is an external collaborator
"""

import hmac

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from photo_challenges.config import Settings, get_settings
from photo_challenges.core.boundary_protocols import Clock
from photo_challenges.core.errors import AdminRequiredError, ParticipantRequiredError
from photo_challenges.infrastructure.clock import get_clock
from photo_challenges.infrastructure.database import get_db
from photo_challenges.services.challenge_store import ChallengeStore
from photo_challenges.services.entry_store import EntryStore
from photo_challenges.services.leaderboard import LeaderboardCalculator
from photo_challenges.services.phase_transitions import PhaseTransitionEngine
from photo_challenges.services.vote_ledger import VoteLedger
from photo_challenges.services.winner_selector import WinnerSelector


async def get_participant_id(
    x_participant_id: str | None = Header(None, alias="X-Participant-Id"),
) -> str:
    if not x_participant_id or not x_participant_id.strip():
        raise ParticipantRequiredError()
    return x_participant_id.strip()


async def require_admin(
    x_admin_token: str | None = Header(None, alias="X-Admin-Token"),
    settings: Settings = Depends(get_settings),
) -> None:
    if not x_admin_token or not hmac.compare_digest(
        x_admin_token.encode(), settings.admin_token.encode(),
    ):
        raise AdminRequiredError()


def get_engine(
    db: AsyncSession = Depends(get_db), clock: Clock = Depends(get_clock),
) -> PhaseTransitionEngine:
    return PhaseTransitionEngine(db, clock)


def get_challenge_store(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    settings: Settings = Depends(get_settings),
) -> ChallengeStore:
    return ChallengeStore(db, clock, upcoming_lead_days=settings.upcoming_lead_days)


def get_entry_store(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    settings: Settings = Depends(get_settings),
) -> EntryStore:
    return EntryStore(db, clock, require_approval=settings.entries_require_approval)


def get_vote_ledger(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    settings: Settings = Depends(get_settings),
) -> VoteLedger:
    return VoteLedger(db, clock, max_attempts=settings.vote_toggle_max_attempts)


def get_leaderboard(db: AsyncSession = Depends(get_db)) -> LeaderboardCalculator:
    return LeaderboardCalculator(db)


def get_winner_selector(db: AsyncSession = Depends(get_db)) -> WinnerSelector:
    return WinnerSelector(db)
