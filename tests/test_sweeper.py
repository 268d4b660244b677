# tests/test_sweeper.py

"""Tests for the tombstone sweeper."""

import asyncio
from datetime import timedelta

import pytest
from scoreforge.db.models import utcnow
from scoreforge.ranking.index import RankingIndex
from scoreforge.services import scoreboard_service
from scoreforge.services.sweeper import TombstoneSweeper, purge_tombstones
from scoreforge.store.entry_store import ScoreboardItemStore, ScoreboardStore
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


@pytest.mark.asyncio
async def test_purge_respects_cutoff(db_session: AsyncSession, ranking_index: RankingIndex):
    board = await scoreboard_service.create_scoreboard(db_session, 1, "Board")
    item = await scoreboard_service.create_item(
        db_session, ranking_index, board.id, user_id=1, username="a", score=1
    )
    await scoreboard_service.delete_item(db_session, ranking_index, board.id, item.id)

    result = await purge_tombstones(
        db_session, ranking_index, utcnow() - timedelta(days=30)
    )

    assert result.items == 0
    assert await ScoreboardItemStore(db_session).exists(item.id)


@pytest.mark.asyncio
async def test_purge_removes_old_tombstones_only(
    db_session: AsyncSession, ranking_index: RankingIndex
):
    board = await scoreboard_service.create_scoreboard(db_session, 1, "Board")
    live = await scoreboard_service.create_item(
        db_session, ranking_index, board.id, user_id=1, username="a", score=1
    )
    dead = await scoreboard_service.create_item(
        db_session, ranking_index, board.id, user_id=2, username="b", score=2
    )
    await scoreboard_service.delete_item(db_session, ranking_index, board.id, dead.id)

    result = await purge_tombstones(db_session, ranking_index, utcnow())

    item_store = ScoreboardItemStore(db_session)
    assert result.items == 1
    assert result.scoreboards == 0
    assert await item_store.exists(live.id)
    assert not await item_store.exists(dead.id)
    assert (await ranking_index.query(board.id)).item_ids == [live.id]


@pytest.mark.asyncio
async def test_purged_scoreboard_takes_its_items(
    db_session: AsyncSession, ranking_index: RankingIndex
):
    board = await scoreboard_service.create_scoreboard(db_session, 1, "Board")
    item = await scoreboard_service.create_item(
        db_session, ranking_index, board.id, user_id=1, username="a", score=1
    )
    await scoreboard_service.delete_scoreboard(db_session, ranking_index, board.id)

    result = await purge_tombstones(db_session, ranking_index, utcnow())

    assert result.scoreboards == 1
    assert result.items == 1
    assert not await ScoreboardStore(db_session).exists(board.id)
    assert not await ScoreboardItemStore(db_session).exists(item.id)


@pytest.mark.asyncio
async def test_sweeper_runs_in_background_until_stopped(
    session_factory: async_sessionmaker[AsyncSession], ranking_index: RankingIndex
):
    async with session_factory() as db:
        board = await scoreboard_service.create_scoreboard(db, 1, "Board")
        await scoreboard_service.delete_scoreboard(db, ranking_index, board.id)

    sweeper = TombstoneSweeper(
        session_factory, ranking_index, retention=timedelta(0), interval_seconds=0.01
    )
    sweeper.start()
    assert sweeper.running

    async with session_factory() as db:
        store = ScoreboardStore(db)
        async with asyncio.timeout(2):
            while await store.exists(board.id):
                await asyncio.sleep(0.01)

    await sweeper.stop()
    assert not sweeper.running


@pytest.mark.asyncio
async def test_stop_without_start_is_harmless(
    session_factory: async_sessionmaker[AsyncSession], ranking_index: RankingIndex
):
    sweeper = TombstoneSweeper(
        session_factory, ranking_index, retention=timedelta(days=30), interval_seconds=60
    )

    await sweeper.stop()

    assert not sweeper.running


@pytest.mark.asyncio
async def test_purged_scoreboard_is_forgotten_by_index(
    db_session: AsyncSession, ranking_index: RankingIndex
):
    """After a purge the index keeps no lock or drop mark for the scoreboard."""
    board = await scoreboard_service.create_scoreboard(db_session, 1, "Board")
    await scoreboard_service.create_item(
        db_session, ranking_index, board.id, user_id=1, username="a", score=1
    )
    await scoreboard_service.delete_scoreboard(db_session, ranking_index, board.id)
    assert ranking_index.is_dropped(board.id)

    await purge_tombstones(db_session, ranking_index, utcnow())

    assert not ranking_index.tracks(board.id)
    assert not ranking_index.is_dropped(board.id)
    assert not ranking_index.is_loaded(board.id)
