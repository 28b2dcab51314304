"""Database Access — async engine, per-request sessions and store-error translation.

Invariants:
    - Every session rolls back on exception before it is closed (no partial commits leak)
    - SQLAlchemy exceptions never leave this layer raw: translate_store_errors() turns
      them into DatabaseError tagged with the failing operation and user id
    - SQLite engines get no pool sizing (aiosqlite pools reject it)

Design Decisions:
    - Singleton db_manager initialized by the FastAPI lifespan (no import side effects)
    - expire_on_commit=False: returned records stay readable after commit in async code
    - SqlAlchemyTransaction wraps AsyncSession commit/rollback so a failing commit is
      reported as the write it belongs to, not as a generic session error
"""

import logging
from contextlib import asynccontextmanager, contextmanager
from typing import AsyncGenerator, Iterator

from sqlalchemy.engine import make_url
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from cmasapp.core.errors import DatabaseError
from cmasapp.db.base import Base
import cmasapp.models  # noqa: F401  (populates Base.metadata)

logger = logging.getLogger(__name__)

# Most specific first: IntegrityError and OperationalError are DBAPIErrors
_STORE_FAILURES: tuple[tuple[type[SQLAlchemyError], str], ...] = (
    (IntegrityError, "integrity constraint violated"),
    (OperationalError, "store unavailable"),
    (DBAPIError, "driver error"),
    (SQLAlchemyError, "unexpected store error"),
)


def _describe(exc: SQLAlchemyError) -> str:
    return next(text for kind, text in _STORE_FAILURES if isinstance(exc, kind))


@contextmanager
def translate_store_errors(operation: str, user_id: int | None = None) -> Iterator[None]:
    """Re-raise SQLAlchemy failures inside the block as DatabaseError."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(
            f"Store {operation} failed: {e}",
            extra={"operation": operation, "user_id": user_id},
        )
        raise DatabaseError(_describe(e), operation, user_id) from e


class SqlAlchemyTransaction:
    """TransactionScope over an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def commit(self) -> None:
        with translate_store_errors("commit"):
            await self.db.commit()

    async def rollback(self) -> None:
        with translate_store_errors("rollback"):
            await self.db.rollback()


class DatabaseSessionManager:
    """Owns the engine and hands out one AsyncSession per request."""

    def __init__(
        self, database_url: str, pool_size: int = 5, max_overflow: int = 10,
    ):
        engine_kwargs: dict = {"pool_pre_ping": True}
        if make_url(database_url).get_backend_name() != "sqlite":
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        db = self._session_factory()
        try:
            with translate_store_errors("session"):
                yield db
        except Exception:
            await db.rollback()
            raise
        finally:
            await db.close()

    async def create_schema(self) -> None:
        """Create missing tables (local/dev databases without alembic)."""
        with translate_store_errors("create_schema"):
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        logger.info("Users table ensured")

    async def dispose(self) -> None:
        await self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
