# tests/conftest.py

"""Pytest configuration and fixtures."""

from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from scoreforge.api.deps import get_ranking_index
from scoreforge.auth import get_current_user_id
from scoreforge.db.models import Base
from scoreforge.db.session import build_engine, build_session_factory, get_db
from scoreforge.main import app
from scoreforge.ranking.index import RankingIndex
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

TEST_USER_ID = 42


@pytest.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """A fresh file-backed SQLite database per test.

    A file rather than :memory: lets several sessions run side by side, the
    way concurrent requests do.
    """
    test_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Fixture to provide a database session to a test."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def ranking_index() -> RankingIndex:
    """A fresh ranking index so projections never leak between tests."""
    return RankingIndex()


@pytest.fixture
def current_user_id() -> int:
    """The user id the authenticated client acts as."""
    return TEST_USER_ID


def _override_dependencies(
    session_factory: async_sessionmaker[AsyncSession], ranking_index: RankingIndex
) -> None:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ranking_index] = lambda: ranking_index


@pytest.fixture
async def async_client(
    session_factory: async_sessionmaker[AsyncSession], ranking_index: RankingIndex
) -> AsyncGenerator[AsyncClient, None]:
    """Fixture to provide an authenticated async test client for the API."""
    _override_dependencies(session_factory, ranking_index)
    app.dependency_overrides[get_current_user_id] = lambda: TEST_USER_ID

    transport = ASGITransport(app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def anonymous_client(
    session_factory: async_sessionmaker[AsyncSession], ranking_index: RankingIndex
) -> AsyncGenerator[AsyncClient, None]:
    """Test client that goes through the real bearer-token dependency."""
    _override_dependencies(session_factory, ranking_index)

    transport = ASGITransport(app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
