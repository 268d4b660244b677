# src/scoreforge/services/scoreboard_service.py

"""Business logic for scoreboard and item writes.

This module is the only writer of both the entry store and the ranking
index. Item creation goes store first, then index, so a failure between the
two can never leave a ranked item that was not stored. Item deletion
removes the index entry before the tombstone commits and puts it back if
the commit fails.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from scoreforge.db.models import Scoreboard, ScoreboardItem
from scoreforge.exceptions import (
    EmptyNameError,
    RecordNotFoundError,
    ScoreboardItemNotFoundError,
    ScoreboardNotFoundError,
    StorageError,
)
from scoreforge.ranking.index import RankingIndex
from scoreforge.store.entry_store import ScoreboardItemStore, ScoreboardStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def storage_errors(db: AsyncSession, operation: str) -> AsyncIterator[None]:
    """Translate database failures into StorageError after a rollback."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(
            "Storage failure",
            extra={"operation": operation, "error": str(e)},
            exc_info=True,
        )
        await db.rollback()
        raise StorageError(operation, str(e)) from e


def _validate_name(name: str) -> str:
    if name is None or not name.strip():
        raise EmptyNameError()
    return name


async def get_scoreboard(db: AsyncSession, scoreboard_id: int) -> Scoreboard:
    """Return a live scoreboard.

    Raises:
        ScoreboardNotFoundError: If the scoreboard is absent or deleted.
    """
    async with storage_errors(db, "get_scoreboard"):
        try:
            scoreboard = await ScoreboardStore(db).get(scoreboard_id)
        except RecordNotFoundError:
            raise ScoreboardNotFoundError(scoreboard_id)
    if scoreboard.is_deleted:
        raise ScoreboardNotFoundError(scoreboard_id)
    return scoreboard


def item_loader(db: AsyncSession, scoreboard_id: int):
    """Loader that feeds a scoreboard's live items to the ranking index."""

    async def load():
        async with storage_errors(db, "load_ranking"):
            return await ScoreboardItemStore(db).live_for_scoreboard(scoreboard_id)

    return load


async def create_scoreboard(db: AsyncSession, author_id: int, name: str) -> Scoreboard:
    """
    Create a scoreboard owned by ``author_id``.

    Raises:
        EmptyNameError: If the name is empty or blank.
    """
    _validate_name(name)
    async with storage_errors(db, "create_scoreboard"):
        scoreboard = await ScoreboardStore(db).put(
            Scoreboard(name=name, author_id=author_id)
        )
    logger.info(
        "Scoreboard created",
        extra={"scoreboard_id": scoreboard.id, "author_id": author_id},
    )
    return scoreboard


async def update_scoreboard(db: AsyncSession, scoreboard_id: int, name: str) -> Scoreboard:
    """
    Rename a live scoreboard. Only name and updated_at change.

    Raises:
        EmptyNameError: If the new name is empty or blank.
        ScoreboardNotFoundError: If the scoreboard is absent or deleted.
    """
    _validate_name(name)
    scoreboard = await get_scoreboard(db, scoreboard_id)
    scoreboard.name = name
    async with storage_errors(db, "update_scoreboard"):
        scoreboard = await ScoreboardStore(db).put(scoreboard)
    logger.info("Scoreboard renamed", extra={"scoreboard_id": scoreboard_id})
    return scoreboard


async def delete_scoreboard(
    db: AsyncSession, index: RankingIndex, scoreboard_id: int
) -> None:
    """
    Soft-delete a scoreboard and hide all of its items.

    Items keep deleted_at unset; they disappear because the index drops the
    scoreboard's projection and listing requires a live parent. A second
    delete of the same scoreboard is reported as not found.

    Raises:
        ScoreboardNotFoundError: If the scoreboard is absent or already deleted.
    """
    await get_scoreboard(db, scoreboard_id)
    async with storage_errors(db, "delete_scoreboard"):
        deleted = await ScoreboardStore(db).soft_delete_if_live(scoreboard_id)
    if deleted is None:
        # A concurrent delete got there first
        raise ScoreboardNotFoundError(scoreboard_id)
    await index.drop_scoreboard(scoreboard_id)
    logger.info("Scoreboard deleted", extra={"scoreboard_id": scoreboard_id})


async def create_item(
    db: AsyncSession,
    index: RankingIndex,
    scoreboard_id: int,
    user_id: int,
    username: str,
    score: int,
) -> ScoreboardItem:
    """
    Submit a scored item into a live scoreboard.

    The record is committed to the store before it is added to the index.

    Raises:
        ScoreboardNotFoundError: If the scoreboard is absent or deleted.
    """
    await get_scoreboard(db, scoreboard_id)
    await index.ensure_loaded(scoreboard_id, item_loader(db, scoreboard_id))

    async with storage_errors(db, "create_item"):
        item = await ScoreboardItemStore(db).put(
            ScoreboardItem(
                scoreboard_id=scoreboard_id,
                user_id=user_id,
                username=username,
                score=score,
            )
        )
    await index.insert(item)

    logger.info(
        "Item created",
        extra={"scoreboard_id": scoreboard_id, "item_id": item.id, "score": score},
    )
    return item


async def delete_item(
    db: AsyncSession, index: RankingIndex, scoreboard_id: int, item_id: int
) -> None:
    """
    Soft-delete an item of a live scoreboard.

    Raises:
        ScoreboardNotFoundError: If the scoreboard is absent or deleted.
        ScoreboardItemNotFoundError: If the item is absent, belongs to another
            scoreboard, or is already deleted.
    """
    await get_scoreboard(db, scoreboard_id)
    store = ScoreboardItemStore(db)

    async with storage_errors(db, "delete_item"):
        try:
            item = await store.get(item_id)
        except RecordNotFoundError:
            raise ScoreboardItemNotFoundError(scoreboard_id, item_id)
    if item.scoreboard_id != scoreboard_id or item.is_deleted:
        raise ScoreboardItemNotFoundError(scoreboard_id, item_id)

    await index.ensure_loaded(scoreboard_id, item_loader(db, scoreboard_id))
    removed = await index.remove(item_id)
    try:
        async with storage_errors(db, "delete_item"):
            deleted = await store.soft_delete_if_live(item_id)
    except StorageError:
        if removed is not None:
            await index.insert(removed)
        raise
    if deleted is None:
        # A concurrent delete tombstoned it first; it stays out of the index
        raise ScoreboardItemNotFoundError(scoreboard_id, item_id)

    logger.info(
        "Item deleted", extra={"scoreboard_id": scoreboard_id, "item_id": item_id}
    )
