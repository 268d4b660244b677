# src/scoreforge/db/session.py

"""Engine and session factory for the entry store."""

import logging
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from scoreforge import config

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str) -> AsyncEngine:
    """Create an async engine for ``url``.

    SQLite gets foreign key enforcement and a busy timeout so concurrent
    writers queue instead of failing; pool settings only apply to servers
    like PostgreSQL.
    """
    if url.startswith("sqlite"):
        sqlite_engine = create_async_engine(
            url,
            echo=config.DB_ECHO,
            connect_args={"timeout": config.DB_SQLITE_BUSY_TIMEOUT},
        )
        event.listen(sqlite_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return sqlite_engine

    return create_async_engine(
        url,
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        pool_recycle=config.DB_POOL_RECYCLE,
        echo=config.DB_ECHO,
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Records stay readable after the store commits; the ranking index reads
    # their sort keys right after each put.
    return async_sessionmaker(
        bind=bind, autocommit=False, autoflush=False, expire_on_commit=False
    )


engine = build_engine(config.DATABASE_URL)
AsyncSessionLocal = build_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request.

    Rolls back if the request fails with the session still in a transaction.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            logger.warning("Request failed, rolling back session", exc_info=True)
            await session.rollback()
            raise
