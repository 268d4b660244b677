# src/scoreforge/services/sweeper.py

"""Periodic physical purge of long-deleted rows.

Tombstones never affect correctness (every read filters on deleted_at), so
purging is optional. While a scoreboard's rows are being purged the sweeper
holds that scoreboard's exclusive index lock, so a purge never overlaps an
index mutation for the same scoreboard.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from scoreforge.db.models import utcnow
from scoreforge.ranking.index import RankingIndex
from scoreforge.services.scoreboard_service import storage_errors
from scoreforge.store.entry_store import ScoreboardItemStore, ScoreboardStore

logger = logging.getLogger(__name__)


@dataclass
class PurgeResult:
    items: int = 0
    scoreboards: int = 0


async def purge_tombstones(
    db: AsyncSession, index: RankingIndex, cutoff: datetime
) -> PurgeResult:
    """Physically delete items and scoreboards deleted before ``cutoff``.

    A purged scoreboard takes all of its items with it, deleted or not.
    """
    result = PurgeResult()
    item_store = ScoreboardItemStore(db)
    scoreboard_store = ScoreboardStore(db)

    async with storage_errors(db, "purge_tombstones"):
        by_scoreboard: dict[int, list[int]] = defaultdict(list)
        for item in await item_store.deleted_before(cutoff):
            by_scoreboard[item.scoreboard_id].append(item.id)

        for scoreboard_id, item_ids in by_scoreboard.items():
            async with index.exclusive(scoreboard_id):
                result.items += await item_store.purge(item_ids)

        for scoreboard in await scoreboard_store.deleted_before(cutoff):
            scoreboard_id = scoreboard.id
            async with index.exclusive(scoreboard_id):
                result.items += await scoreboard_store.purge(scoreboard_id)
                result.scoreboards += 1
            index.forget(scoreboard_id)

    if result.items or result.scoreboards:
        logger.info(
            "Tombstones purged",
            extra={"items": result.items, "scoreboards": result.scoreboards},
        )
    return result


class TombstoneSweeper:
    """Runs purge_tombstones on a fixed interval until stopped."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        index: RankingIndex,
        retention: timedelta,
        interval_seconds: float,
    ) -> None:
        self.session_factory = session_factory
        self.index = index
        self.retention = retention
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def sweep_once(self) -> PurgeResult:
        async with self.session_factory() as db:
            return await purge_tombstones(db, self.index, utcnow() - self.retention)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.sweep_once()
            except Exception:
                # A failed sweep is retried on the next tick
                logger.error("Tombstone sweep failed", exc_info=True)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="tombstone-sweeper")
        logger.info(
            "Tombstone sweeper started",
            extra={
                "interval_seconds": self.interval_seconds,
                "retention_days": self.retention.days,
            },
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Tombstone sweeper stopped")
