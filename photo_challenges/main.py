"""Photo Challenges API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ChallengeEngineError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized and phase runner started in the lifespan; both torn down on exit

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Background runner plus lazy engine runs in routes: phases are correct on read even
      when the runner is disabled or behind
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from photo_challenges.api.error_handlers import register_error_handlers
from photo_challenges.api.routes import admin, challenges, entries, health, votes
from photo_challenges.config import get_settings
from photo_challenges.infrastructure.clock import system_clock
from photo_challenges.infrastructure.database import init_db
from photo_challenges.infrastructure.observability import setup_logging
from photo_challenges.infrastructure.phase_runner import PhaseRunner

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    runner = None
    if settings.phase_runner_enabled:
        runner = PhaseRunner(
            manager, system_clock,
            interval_seconds=settings.phase_runner_interval_seconds,
        )
        runner.start()
    app.state.phase_runner = runner
    logger.info("Photo Challenges API started")
    yield
    logger.info("Photo Challenges API shutting down")
    if runner is not None:
        await runner.stop()
    await manager.dispose()


app = FastAPI(
    title="Photo Challenges API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(challenges.router)
app.include_router(entries.router)
app.include_router(votes.router)
app.include_router(admin.router)

register_error_handlers(app)
