# src/scoreforge/store/entry_store.py

"""Durable keyed storage for scoreboards and items, tombstones included.

The store has no ordering guarantees of its own. Every mutating call commits
its own unit of work, so no partial write is ever observable. Callers
serialize writes to a given record; the only conditional write is
soft_delete_if_live, which lets concurrent deletes agree on a single winner.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Generic, Sequence, TypeVar

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from scoreforge.db.models import Scoreboard, ScoreboardItem, utcnow
from scoreforge.exceptions import RecordNotFoundError

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", Scoreboard, ScoreboardItem)


class EntryStore(Generic[RecordT]):
    """Key-value access to one record type on top of an AsyncSession."""

    def __init__(self, db: AsyncSession, model: type[RecordT]) -> None:
        self.db = db
        self.model = model

    async def put(self, record: RecordT) -> RecordT:
        """Insert or replace a record and return it as stored.

        A first insert gets created_at == updated_at == now. Later puts of
        the same record only move updated_at.
        """
        now = utcnow()
        if record.id is None:
            record.created_at = now
        record.updated_at = now

        self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)
        return record

    async def get(self, record_id: int) -> RecordT:
        """Fetch a record by id, whether live or tombstoned."""
        record = await self.db.get(self.model, record_id)
        if record is None:
            raise RecordNotFoundError(self.model.__name__, record_id)
        return record

    async def exists(self, record_id: int) -> bool:
        query = select(self.model.id).where(self.model.id == record_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none() is not None

    async def soft_delete(self, record_id: int) -> RecordT:
        """Tombstone a record.

        Idempotent: a record that is already deleted keeps its original
        deleted_at and the call succeeds.
        """
        record = await self.get(record_id)
        if record.deleted_at is not None:
            return record

        record.deleted_at = utcnow()
        self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)
        logger.debug(
            "Record tombstoned",
            extra={"record_type": self.model.__name__, "record_id": record_id},
        )
        return record

    async def soft_delete_if_live(self, record_id: int) -> RecordT | None:
        """Tombstone a record only if it is still live.

        The check and the write are one conditional UPDATE, so of several
        concurrent callers exactly one gets the record back; the rest get
        None.
        """
        result = await self.db.execute(
            update(self.model)
            .where(self.model.id == record_id, self.model.deleted_at.is_(None))
            .values(deleted_at=utcnow())
        )
        await self.db.commit()
        if not result.rowcount:
            return None

        record = await self.get(record_id)
        await self.db.refresh(record)
        logger.debug(
            "Record tombstoned",
            extra={"record_type": self.model.__name__, "record_id": record_id},
        )
        return record

    async def deleted_before(self, cutoff: datetime) -> Sequence[RecordT]:
        """Return tombstones whose deleted_at is older than the cutoff."""
        query = select(self.model).where(
            self.model.deleted_at.is_not(None), self.model.deleted_at < cutoff
        )
        result = await self.db.execute(query)
        return result.scalars().all()


class ScoreboardItemStore(EntryStore[ScoreboardItem]):
    """Item store with the per-scoreboard queries the ranking index needs."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, ScoreboardItem)

    async def live_for_scoreboard(self, scoreboard_id: int) -> Sequence[ScoreboardItem]:
        query = select(ScoreboardItem).where(
            ScoreboardItem.scoreboard_id == scoreboard_id,
            ScoreboardItem.deleted_at.is_(None),
        )
        result = await self.db.execute(query)
        return result.scalars().all()

    async def get_many(self, item_ids: Sequence[int]) -> dict[int, ScoreboardItem]:
        """Hydrate a batch of ids in a single query."""
        if not item_ids:
            return {}
        query = select(ScoreboardItem).where(ScoreboardItem.id.in_(item_ids))
        result = await self.db.execute(query)
        return {item.id: item for item in result.scalars().all()}

    async def purge(self, item_ids: Sequence[int]) -> int:
        """Physically delete tombstoned items. Live items are never touched."""
        if not item_ids:
            return 0
        result = await self.db.execute(
            delete(ScoreboardItem).where(
                ScoreboardItem.id.in_(item_ids),
                ScoreboardItem.deleted_at.is_not(None),
            )
        )
        await self.db.commit()
        return result.rowcount or 0


class ScoreboardStore(EntryStore[Scoreboard]):
    """Scoreboard store."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Scoreboard)

    async def purge(self, scoreboard_id: int) -> int:
        """Physically delete a tombstoned scoreboard and every item under it.

        Returns the number of items removed along with it, or 0 when the
        scoreboard is live or already gone.
        """
        scoreboard = await self.db.get(Scoreboard, scoreboard_id)
        if scoreboard is None or scoreboard.deleted_at is None:
            return 0

        items_result = await self.db.execute(
            delete(ScoreboardItem).where(ScoreboardItem.scoreboard_id == scoreboard_id)
        )
        await self.db.delete(scoreboard)
        await self.db.commit()
        return items_result.rowcount or 0
