"""Service test fixtures — async DB, seeded challenges, and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database with foreign keys on
    - get_db and get_clock overridden so routes share the test DB and the fake clock
    - db_manager patched for code that opens sessions directly (phase runner, readiness)

Design Decisions:
    - In-memory SQLite for behaviour tests; concurrency tests use a file database
      (`file_session_factory`) because the in-memory engine shares one connection
"""

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

import photo_challenges.models  # noqa: F401
import photo_challenges.infrastructure.database as db_module
from photo_challenges.config import Settings, get_settings
from photo_challenges.db.base import Base
from photo_challenges.db.session import (
    create_session_factory, enable_sqlite_foreign_keys,
)
from photo_challenges.infrastructure.clock import get_clock
from photo_challenges.infrastructure.database import get_db, DatabaseSessionManager
from photo_challenges.main import app
from photo_challenges.services.challenge_store import ChallengeStore
from photo_challenges.services.entry_store import EntryStore
from tests.support import ADMIN_TOKEN, T0



@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def file_session_factory(tmp_path):
    """Session factory over a file database: one pooled connection per session."""
    factory = create_session_factory(f"sqlite+aiosqlite:///{tmp_path / 'race.db'}")
    engine = factory.kw["bind"]
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield factory
    await engine.dispose()


@pytest.fixture
def challenge_store(test_db, clock):
    return ChallengeStore(test_db, clock)


@pytest.fixture
def entry_store(test_db, clock):
    return EntryStore(test_db, clock)


@pytest.fixture
async def challenge(challenge_store):
    """Challenge with start=T0, end=T0+7d, voting_end=T0+10d; clock sits before T0."""
    return await challenge_store.create(
        title="Golden Hour",
        slug="golden-hour",
        theme="Light at dusk",
        description="Shoot the last hour of sunlight.",
        start_date=T0,
        end_date=T0 + timedelta(days=7),
        voting_end=T0 + timedelta(days=10),
    )


@pytest.fixture
async def client(test_engine, test_session_factory, clock):
    """FastAPI test client with DB, clock and settings overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_settings] = lambda: Settings(
        admin_token=ADMIN_TOKEN, phase_runner_enabled=False,
    )

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def admin_headers():
    return {"X-Admin-Token": ADMIN_TOKEN}


