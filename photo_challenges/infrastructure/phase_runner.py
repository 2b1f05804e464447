"""Phase Runner — background loop that runs the transition engine on a fixed interval.

Invariants:
    - Each tick opens its own DB session (never shares the request session)
    - A failed tick is logged and the loop keeps going; the next tick retries
    - stop() cancels and awaits the task so shutdown never leaves it dangling

Design Decisions:
    - Lives beside the lifespan rather than in a separate worker process: the engine is
      idempotent, so multiple app instances running it concurrently is safe
"""

import asyncio
import logging

from photo_challenges.core.boundary_protocols import Clock
from photo_challenges.infrastructure.database import DatabaseSessionManager
from photo_challenges.services.phase_transitions import (
    PhaseTransitionEngine, TransitionReport,
)

logger = logging.getLogger(__name__)


class PhaseRunner:
    """Periodically advances challenge phases."""

    def __init__(
        self, manager: DatabaseSessionManager, clock: Clock, interval_seconds: float = 60,
    ):
        self.manager = manager
        self.clock = clock
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def tick(self) -> TransitionReport:
        """Run the engine once over every open challenge."""
        async with self.manager.session() as db:
            return await PhaseTransitionEngine(db, self.clock).run()

    async def _loop(self) -> None:
        logger.info(f"Phase runner started (interval: {self.interval_seconds}s)")
        while True:
            try:
                await self.tick()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Phase runner tick failed: {e}", exc_info=True)
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> None:
        if self.running:
            logger.warning("Phase runner is already running")
            return
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Phase runner stopped")
