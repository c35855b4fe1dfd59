"""Database Session Manager — async connection pool, units of work, and error mapping.

Invariants:
    - Every unit of work commits as a whole or rolls back as a whole
    - Every session auto-rolls-back on exception (no partial commits leak)
    - All SQLAlchemy exceptions mapped to roomstate errors by database_error()
    - Serialization failures and deadlocks (SQLSTATE 40001 / 40P01) map to the
      retryable ConcurrencyError; everything else maps to DatabaseError

Design Decisions:
    - atomic() re-raises IntegrityError untouched after rollback: callers know
      which key they were inserting and turn the collision into a domain error
    - Singleton db_manager initialized on startup by the FastAPI lifespan;
      services never read it, they receive their AsyncSession explicitly
    - expire_on_commit=False: returned rows stay readable after commit
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

from roomstate.core.errors import (
    ConcurrencyError, DatabaseError, ErrorContext, RoomStateError,
)

logger = logging.getLogger(__name__)

_RETRYABLE_SQLSTATES = frozenset({"40001", "40P01"})


def _sqlstate(exc: DBAPIError) -> str | None:
    orig = exc.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def database_error(
    exc: SQLAlchemyError, operation: str, context: ErrorContext | None = None,
) -> RoomStateError:
    """Translate a SQLAlchemy exception into the roomstate error taxonomy."""
    if isinstance(exc, DBAPIError) and _sqlstate(exc) in _RETRYABLE_SQLSTATES:
        return ConcurrencyError(
            f"{operation} aborted by a concurrent transaction", context,
        )
    if isinstance(exc, IntegrityError):
        return DatabaseError("Integrity constraint violated", operation, context)
    if isinstance(exc, OperationalError):
        return DatabaseError("Connection or operational error", operation, context)
    if isinstance(exc, DBAPIError):
        return DatabaseError("Database driver error", operation, context)
    return DatabaseError("Database operation failed", operation, context)


@asynccontextmanager
async def atomic(
    session: AsyncSession, operation: str,
) -> AsyncGenerator[AsyncSession, None]:
    """Run the block as one unit of work on session.

    Commits when the block exits normally. On any exception the session is
    rolled back first; IntegrityError and roomstate errors propagate as they
    are, other SQLAlchemy errors are converted by database_error().
    """
    try:
        yield session
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"DB error during {operation}: {e}", extra={"operation": operation})
        raise database_error(e, operation) from e
    except Exception:
        await session.rollback()
        raise


@asynccontextmanager
async def storage_errors(
    session: AsyncSession, operation: str,
) -> AsyncGenerator[None, None]:
    """Map SQLAlchemy errors raised by reads in the block; the session is
    rolled back so it stays usable."""
    try:
        yield
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"DB error during {operation}: {e}", extra={"operation": operation})
        raise database_error(e, operation) from e


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 20,
        max_overflow: int = 10,
        isolation_level: str | None = None,
    ):
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
            if isolation_level:
                engine_kwargs["isolation_level"] = isolation_level
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"DB error: {e}")
            raise database_error(e, "session") from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs):
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)

