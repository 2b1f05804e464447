"""Phase Transition Engine — advances challenge phases strictly by comparing the clock to stored boundaries.

Invariants:
    - Only ever moves phases forward, one step per UPDATE
    - Every step is a compare-and-set: UPDATE ... WHERE id = ? AND phase = <source>
    - A concurrent runner that already applied a step makes ours a no-op, never an error
    - Each challenge is carried all the way to its time-consistent phase before the next one
    - "Nothing to do" is success with an empty report

Design Decisions:
    - Pure phase_machine.advance() decides the hops; this module only applies them
    - Commit per challenge: a failure on one challenge never rolls back progress on another
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from photo_challenges.core.boundary_protocols import ChallengeLike, Clock
from photo_challenges.core.domain_types import ChallengeId, Phase
from photo_challenges.core.phase_machine import PhaseBoundaries, advance
from photo_challenges.models.challenge import Challenge

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppliedTransition:
    challenge_id: ChallengeId
    from_phase: Phase
    to_phase: Phase


@dataclass
class TransitionReport:
    """Outcome of one engine run."""
    examined: int = 0
    applied: list[AppliedTransition] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "examined": self.examined,
            "applied": [
                {
                    "challenge_id": str(t.challenge_id),
                    "from_phase": t.from_phase.value,
                    "to_phase": t.to_phase.value,
                }
                for t in self.applied
            ],
        }


def boundaries_of(challenge: ChallengeLike) -> PhaseBoundaries:
    return PhaseBoundaries(
        challenge.start_date, challenge.end_date, challenge.voting_end,
    )


async def compare_and_set_phase(
    db: AsyncSession, challenge_id: ChallengeId, source: Phase, target: Phase,
) -> bool:
    """Move one challenge from `source` to `target` iff it is still in `source`.

    Does not commit. Returns False when another writer got there first.
    """
    result = await db.execute(
        update(Challenge)
        .where(Challenge.id == challenge_id, Challenge.phase == source)
        .values(phase=target)
    )
    return result.rowcount == 1


async def current_phase(db: AsyncSession, challenge_id: ChallengeId) -> Phase | None:
    result = await db.execute(
        select(Challenge.phase).where(Challenge.id == challenge_id),
    )
    return result.scalar_one_or_none()


class PhaseTransitionEngine:
    """Idempotent, concurrency-safe phase advancement over a batch of challenges."""

    def __init__(self, db: AsyncSession, clock: Clock):
        self.db = db
        self.clock = clock

    async def run(self, challenge_ids: list[ChallengeId] | None = None) -> TransitionReport:
        """Advance every non-completed challenge (or just `challenge_ids`) to the phase `now` implies."""
        now = self.clock.now()
        query = select(
            Challenge.id, Challenge.phase,
            Challenge.start_date, Challenge.end_date, Challenge.voting_end,
        ).where(Challenge.phase != Phase.COMPLETED)
        if challenge_ids is not None:
            if not challenge_ids:
                return TransitionReport()
            query = query.where(Challenge.id.in_(challenge_ids))

        rows = (await self.db.execute(query.order_by(Challenge.start_date))).all()
        report = TransitionReport(examined=len(rows))

        for row in rows:
            boundaries = boundaries_of(row)
            applied = await self._advance_one(row.id, row.phase, boundaries, now)
            report.applied.extend(applied)

        if report.applied:
            logger.info(
                f"Phase engine applied {len(report.applied)} transition(s)",
                extra={"transitions": len(report.applied)},
            )
        return report

    async def _advance_one(
        self, challenge_id: ChallengeId, phase: Phase,
        boundaries: PhaseBoundaries, now: datetime,
    ) -> list[AppliedTransition]:
        applied: list[AppliedTransition] = []
        source = phase
        hops = advance(source, boundaries, now)
        while hops:
            target = hops[0]
            if await compare_and_set_phase(self.db, challenge_id, source, target):
                applied.append(AppliedTransition(challenge_id, source, target))
                logger.info(
                    f"Challenge {challenge_id} moved {source.value} -> {target.value}",
                    extra={
                        "challenge_id": str(challenge_id),
                        "from_phase": source.value,
                        "to_phase": target.value,
                    },
                )
                source = target
            else:
                # Another runner moved it; resume from wherever it is now.
                observed = await current_phase(self.db, challenge_id)
                if observed is None:
                    break
                source = observed
            hops = advance(source, boundaries, now)
        await self.db.commit()
        return applied
