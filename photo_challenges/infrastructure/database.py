"""Database Session Manager — async engine, request sessions, error mapping and readiness.

Invariants:
    - A session that exits with an exception is rolled back before it is closed
    - Stale pooled connections are detected with pool_pre_ping
    - SQLAlchemy failures that escape a service become DatabaseError (503); services
      translate the IntegrityErrors they expect (duplicate slug, entry, vote) before that
    - Domain errors pass through untouched

Design Decisions:
    - Module singleton db_manager created by init_db() in the lifespan, not at import
    - expire_on_commit=False: ORM rows stay readable after commit in async code
    - Pool sizing only for server databases; SQLite keeps the dialect's default pool
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy import text

from photo_challenges.core.errors import DatabaseError
from photo_challenges.db.session import enable_sqlite_foreign_keys

logger = logging.getLogger(__name__)

# Most specific first: IntegrityError and OperationalError are DBAPIErrors.
_FAILURE_KINDS: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "constraint violated", "commit"),
    (OperationalError, "connection lost or database unavailable", "execute"),
    (DBAPIError, "driver rejected the statement", "query"),
    (SQLAlchemyError, "unexpected storage failure", "unknown"),
)


def _to_database_error(exc: SQLAlchemyError) -> DatabaseError:
    for kind, message, operation in _FAILURE_KINDS:
        if isinstance(exc, kind):
            return DatabaseError(message, operation)
    return DatabaseError("unexpected storage failure", "unknown")


class DatabaseSessionManager:
    """Owns the engine and hands out auto-rollback sessions."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        enable_sqlite_foreign_keys(self.engine)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            error = _to_database_error(e)
            logger.error(
                f"{type(e).__name__} during {error.operation}: {e}",
                extra={"error_code": error.code},
            )
            raise error from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """True when a trivial query round-trips (readiness probe)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
