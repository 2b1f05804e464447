"""Phase Transition Engine — time-driven advancement, idempotence and race safety.

Invariants:
    - A run with nothing due is success with an empty report
    - A stale challenge is carried through every intermediate phase in one run
    - Concurrent runs apply each transition exactly once
"""

import asyncio
from datetime import timedelta

from photo_challenges.core.domain_types import Phase
from photo_challenges.services.challenge_store import ChallengeStore
from photo_challenges.services.phase_transitions import (
    PhaseTransitionEngine, compare_and_set_phase, current_phase,
)
from tests.support import T0, FakeClock


async def _phase(test_db, challenge_id):
    return await current_phase(test_db, challenge_id)


async def test_nothing_due_is_empty_report(test_db, clock, challenge):
    report = await PhaseTransitionEngine(test_db, clock).run()
    assert report.examined == 1
    assert report.applied == []
    assert await _phase(test_db, challenge.id) == Phase.UPCOMING


async def test_no_challenges_at_all(test_db, clock):
    report = await PhaseTransitionEngine(test_db, clock).run()
    assert report.to_dict() == {"examined": 0, "applied": []}


async def test_one_second_before_start_stays_upcoming(test_db, clock, challenge):
    clock.set(T0 - timedelta(seconds=1))
    await PhaseTransitionEngine(test_db, clock).run()
    assert await _phase(test_db, challenge.id) == Phase.UPCOMING


async def test_boundaries_drive_each_phase(test_db, clock, challenge):
    engine = PhaseTransitionEngine(test_db, clock)
    for offset, expected in (
        (timedelta(0), Phase.ACTIVE),
        (timedelta(days=7), Phase.VOTING),
        (timedelta(days=10), Phase.COMPLETED),
    ):
        clock.set(T0 + offset)
        await engine.run()
        assert await _phase(test_db, challenge.id) == expected


async def test_stale_challenge_catches_up_in_one_run(test_db, clock, challenge):
    clock.set(T0 + timedelta(days=30))
    report = await PhaseTransitionEngine(test_db, clock).run()
    assert [(t.from_phase, t.to_phase) for t in report.applied] == [
        (Phase.UPCOMING, Phase.ACTIVE),
        (Phase.ACTIVE, Phase.VOTING),
        (Phase.VOTING, Phase.COMPLETED),
    ]
    assert await _phase(test_db, challenge.id) == Phase.COMPLETED


async def test_rerun_is_idempotent(test_db, clock, challenge):
    clock.set(T0 + timedelta(days=8))
    engine = PhaseTransitionEngine(test_db, clock)
    first = await engine.run()
    second = await engine.run()
    assert len(first.applied) == 2
    assert second.applied == []


async def test_completed_challenges_not_examined(test_db, clock, challenge):
    clock.set(T0 + timedelta(days=11))
    engine = PhaseTransitionEngine(test_db, clock)
    await engine.run()
    report = await engine.run()
    assert report.examined == 0


async def test_run_scoped_to_ids(test_db, clock, challenge, challenge_store):
    other = await challenge_store.create(
        title="Other", slug="other", theme="t", description="d",
        start_date=T0, end_date=T0 + timedelta(days=1), voting_end=T0 + timedelta(days=2),
    )
    clock.set(T0 + timedelta(hours=1))
    report = await PhaseTransitionEngine(test_db, clock).run([challenge.id])
    assert [t.challenge_id for t in report.applied] == [challenge.id]
    assert await _phase(test_db, other.id) == Phase.UPCOMING


async def test_empty_id_list_does_nothing(test_db, clock, challenge):
    clock.set(T0 + timedelta(days=30))
    report = await PhaseTransitionEngine(test_db, clock).run([])
    assert report.examined == 0
    assert await _phase(test_db, challenge.id) == Phase.UPCOMING


async def test_compare_and_set_requires_expected_source(test_db, challenge):
    assert await compare_and_set_phase(
        test_db, challenge.id, Phase.ACTIVE, Phase.VOTING,
    ) is False
    assert await compare_and_set_phase(
        test_db, challenge.id, Phase.UPCOMING, Phase.ACTIVE,
    ) is True
    await test_db.commit()
    assert await _phase(test_db, challenge.id) == Phase.ACTIVE


async def test_report_to_dict(test_db, clock, challenge):
    clock.set(T0)
    report = await PhaseTransitionEngine(test_db, clock).run()
    assert report.to_dict() == {
        "examined": 1,
        "applied": [{
            "challenge_id": str(challenge.id),
            "from_phase": "UPCOMING",
            "to_phase": "ACTIVE",
        }],
    }


# ─── Concurrency ─────────────────────────────────────────────────

async def test_concurrent_runs_apply_each_transition_once(file_session_factory):
    clock = FakeClock(T0 - timedelta(days=1))
    async with file_session_factory() as db:
        store = ChallengeStore(db, clock)
        ids = []
        for n in range(3):
            created = await store.create(
                title=f"C{n}", slug=f"c-{n}", theme="t", description="d",
                start_date=T0, end_date=T0 + timedelta(days=7),
                voting_end=T0 + timedelta(days=10),
            )
            ids.append(created.id)

    clock.set(T0 + timedelta(days=12))

    async def run_engine():
        async with file_session_factory() as db:
            return await PhaseTransitionEngine(db, clock).run()

    reports = await asyncio.gather(*(run_engine() for _ in range(4)))

    applied = [
        (t.challenge_id, t.from_phase, t.to_phase)
        for report in reports for t in report.applied
    ]
    assert len(applied) == len(set(applied)) == 3 * len(ids)
    async with file_session_factory() as db:
        for challenge_id in ids:
            assert await current_phase(db, challenge_id) == Phase.COMPLETED
