# src/scoreforge/ranking/index.py

"""In-memory ranking index over each scoreboard's live items.

For every scoreboard the index keeps one sorted key list per maintained
(sort field, direction) pair. A key is ``(value, item_id)`` with the value
wrapped in ``_Descending`` for descending orders, so the secondary order is
always item id ascending whatever the requested direction. Keys are unique,
which makes every order total and page boundaries stable.

The index only mirrors the sort keys of an item; everything else is
hydrated from the entry store by the caller.
"""

from __future__ import annotations

import bisect
import functools
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, AsyncContextManager, Awaitable, Callable, Iterable

from scoreforge import config
from scoreforge.db.models import ScoreboardItem
from scoreforge.exceptions import ScoreForgeError
from scoreforge.ranking.locks import ReadWriteLock
from scoreforge.schemas.pagination import ItemSortField, SortOrder

logger = logging.getLogger(__name__)

ItemLoader = Callable[[], Awaitable[Iterable[ScoreboardItem]]]


class IndexNotLoadedError(ScoreForgeError):
    """Raised when a scoreboard is queried before its projection is built."""

    def __init__(self, scoreboard_id: int) -> None:
        super().__init__(
            message=f"Ranking for scoreboard {scoreboard_id} is not loaded",
            details={"scoreboard_id": scoreboard_id},
        )


def normalize_page(page: int | None, size: int | None) -> tuple[int, int]:
    """Default and clamp pagination parameters.

    page < 1 or missing becomes 1; size defaults to DEFAULT_PAGE_SIZE and is
    clamped to [1, MAX_PAGE_SIZE].
    """
    if page is None or page < 1:
        page = 1
    if size is None:
        size = config.DEFAULT_PAGE_SIZE
    size = max(1, min(size, config.MAX_PAGE_SIZE))
    return page, size


def _naive_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes, freshly built records are aware
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


@dataclass(frozen=True)
class IndexedItem:
    """The sort keys of one live item."""

    id: int
    scoreboard_id: int
    score: int
    username: str
    created_at: datetime

    @classmethod
    def from_record(cls, item: ScoreboardItem) -> "IndexedItem":
        return cls(
            id=item.id,
            scoreboard_id=item.scoreboard_id,
            score=item.score,
            username=item.username,
            created_at=_naive_utc(item.created_at),
        )

    def sort_value(self, field: ItemSortField) -> Any:
        if field is ItemSortField.SCORE:
            return self.score
        if field is ItemSortField.USERNAME:
            return self.username
        return self.created_at


@functools.total_ordering
class _Descending:
    """Inverts the natural order of the wrapped value."""

    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value = value

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _Descending) and self.value == other.value

    def __lt__(self, other: "_Descending") -> bool:
        return self.value > other.value

    def __repr__(self) -> str:
        return f"_Descending({self.value!r})"


def _order_key(entry: IndexedItem, field: ItemSortField, direction: SortOrder) -> tuple:
    value = entry.sort_value(field)
    if direction is SortOrder.DESC:
        value = _Descending(value)
    return (value, entry.id)


@dataclass
class RankedSlice:
    """A page of item ids plus the size of the live set it was cut from."""

    item_ids: list[int]
    total: int


class ScoreboardRanking:
    """Ordered projections of a single scoreboard's live items.

    Not synchronized; RankingIndex guards each instance with its lock.
    """

    def __init__(self, scoreboard_id: int, indexed_fields: Iterable[ItemSortField]):
        self.scoreboard_id = scoreboard_id
        self._entries: dict[int, IndexedItem] = {}
        self._orderings: dict[tuple[ItemSortField, SortOrder], list[tuple]] = {
            (field, direction): [] for field in indexed_fields for direction in SortOrder
        }

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._entries

    def item_ids(self) -> list[int]:
        return list(self._entries)

    def insert(self, entry: IndexedItem) -> None:
        # Re-inserting an id replaces its previous keys
        if entry.id in self._entries:
            self.remove(entry.id)
        self._entries[entry.id] = entry
        for (field, direction), keys in self._orderings.items():
            bisect.insort(keys, _order_key(entry, field, direction))

    def remove(self, item_id: int) -> IndexedItem | None:
        entry = self._entries.pop(item_id, None)
        if entry is None:
            return None
        for (field, direction), keys in self._orderings.items():
            pos = bisect.bisect_left(keys, _order_key(entry, field, direction))
            del keys[pos]
        return entry

    def is_maintained(self, field: ItemSortField, direction: SortOrder) -> bool:
        return (field, direction) in self._orderings

    def ordered_keys(self, field: ItemSortField, direction: SortOrder) -> list[tuple]:
        keys = self._orderings.get((field, direction))
        if keys is None:
            # No maintained ordering for this field: sort the live set now
            keys = sorted(
                _order_key(entry, field, direction) for entry in self._entries.values()
            )
        return keys

    def page(
        self, field: ItemSortField, direction: SortOrder, offset: int, limit: int
    ) -> list[int]:
        keys = self.ordered_keys(field, direction)
        return [item_id for _, item_id in keys[offset : offset + limit]]

    def page_after(
        self,
        field: ItemSortField,
        direction: SortOrder,
        cursor: IndexedItem,
        limit: int,
    ) -> list[int]:
        """Ids strictly after the cursor's position, which need not be live."""
        keys = self.ordered_keys(field, direction)
        start = bisect.bisect_right(keys, _order_key(cursor, field, direction))
        return [item_id for _, item_id in keys[start : start + limit]]


class RankingIndex:
    """Per-scoreboard ranking projections, each behind its own lock.

    Projections are built lazily from the entry store on first use. Writes
    to one scoreboard never block reads or writes on another.
    """

    def __init__(self, indexed_fields: Iterable[str | ItemSortField] | None = None):
        if indexed_fields is None:
            fields = list(ItemSortField)
        else:
            fields = [ItemSortField(field) for field in indexed_fields]
        self.indexed_fields: tuple[ItemSortField, ...] = tuple(dict.fromkeys(fields))

        self._rankings: dict[int, ScoreboardRanking] = {}
        self._locks: dict[int, ReadWriteLock] = {}
        self._owners: dict[int, int] = {}
        self._dropped: set[int] = set()

    def lock_for(self, scoreboard_id: int) -> ReadWriteLock:
        return self._locks.setdefault(scoreboard_id, ReadWriteLock())

    def exclusive(self, scoreboard_id: int) -> AsyncContextManager[None]:
        """Exclusive access to one scoreboard's projection."""
        return self.lock_for(scoreboard_id).write()

    def is_loaded(self, scoreboard_id: int) -> bool:
        return scoreboard_id in self._rankings

    def is_dropped(self, scoreboard_id: int) -> bool:
        return scoreboard_id in self._dropped

    def scoreboard_of(self, item_id: int) -> int | None:
        return self._owners.get(item_id)

    async def ensure_loaded(self, scoreboard_id: int, loader: ItemLoader) -> None:
        """Build the scoreboard's projection from the store if needed.

        The write lock is held across the loader call so no insert or remove
        can interleave with the initial build.
        """
        if scoreboard_id in self._rankings or scoreboard_id in self._dropped:
            return
        async with self.lock_for(scoreboard_id).write():
            if scoreboard_id in self._rankings or scoreboard_id in self._dropped:
                return
            ranking = ScoreboardRanking(scoreboard_id, self.indexed_fields)
            for record in await loader():
                if record.deleted_at is None:
                    ranking.insert(IndexedItem.from_record(record))
                    self._owners[record.id] = scoreboard_id
            self._rankings[scoreboard_id] = ranking
        logger.debug(
            "Ranking loaded",
            extra={"scoreboard_id": scoreboard_id, "live_items": len(ranking)},
        )

    async def insert(self, item: ScoreboardItem | IndexedItem) -> bool:
        """Add or replace an item. Visible to queries once this returns.

        Returns False when the scoreboard has no projection yet; the item is
        already in the store and will be picked up by the lazy load.
        """
        entry = item if isinstance(item, IndexedItem) else IndexedItem.from_record(item)
        async with self.lock_for(entry.scoreboard_id).write():
            ranking = self._rankings.get(entry.scoreboard_id)
            if ranking is None:
                return False
            ranking.insert(entry)
            self._owners[entry.id] = entry.scoreboard_id
        return True

    async def remove(self, item_id: int) -> IndexedItem | None:
        """Drop an item from every ordering. Returns its former keys."""
        scoreboard_id = self._owners.get(item_id)
        if scoreboard_id is None:
            return None
        async with self.lock_for(scoreboard_id).write():
            ranking = self._rankings.get(scoreboard_id)
            self._owners.pop(item_id, None)
            if ranking is None:
                return None
            return ranking.remove(item_id)

    async def drop_scoreboard(self, scoreboard_id: int) -> None:
        """Forget a deleted scoreboard; it will never be loaded again."""
        async with self.lock_for(scoreboard_id).write():
            self._dropped.add(scoreboard_id)
            ranking = self._rankings.pop(scoreboard_id, None)
            if ranking is not None:
                for item_id in ranking.item_ids():
                    self._owners.pop(item_id, None)

    def forget(self, scoreboard_id: int) -> None:
        """Release all state for a scoreboard whose rows were purged.

        Call only after the purge has committed and outside the scoreboard's
        lock scope; the id is gone from the store and is never reissued.
        """
        ranking = self._rankings.pop(scoreboard_id, None)
        if ranking is not None:
            for item_id in ranking.item_ids():
                self._owners.pop(item_id, None)
        self._dropped.discard(scoreboard_id)
        self._locks.pop(scoreboard_id, None)

    def tracks(self, scoreboard_id: int) -> bool:
        """Whether the index holds any state (projection, lock, drop mark)."""
        return (
            scoreboard_id in self._rankings
            or scoreboard_id in self._locks
            or scoreboard_id in self._dropped
        )

    def _ranking_for_read(self, scoreboard_id: int) -> ScoreboardRanking | None:
        if scoreboard_id in self._dropped:
            return None
        ranking = self._rankings.get(scoreboard_id)
        if ranking is None:
            raise IndexNotLoadedError(scoreboard_id)
        return ranking

    async def query(
        self,
        scoreboard_id: int,
        sort_by: str | ItemSortField | None = None,
        direction: str | SortOrder | None = None,
        page: int | None = None,
        size: int | None = None,
    ) -> RankedSlice:
        """Return one page of item ids plus the live item count.

        Unknown sort fields fall back to createdAt and unknown directions to
        ascending. A dropped scoreboard reads as empty.
        """
        field = ItemSortField.parse(sort_by)
        order = SortOrder.lenient(direction)
        page, size = normalize_page(page, size)

        async with self.lock_for(scoreboard_id).read():
            ranking = self._ranking_for_read(scoreboard_id)
            if ranking is None:
                return RankedSlice(item_ids=[], total=0)
            ids = ranking.page(field, order, (page - 1) * size, size)
            return RankedSlice(item_ids=ids, total=len(ranking))

    async def query_after(
        self,
        scoreboard_id: int,
        cursor: ScoreboardItem | IndexedItem,
        sort_by: str | ItemSortField | None = None,
        direction: str | SortOrder | None = None,
        size: int | None = None,
    ) -> RankedSlice:
        """Keyset variant of query: the page starting right after ``cursor``.

        The cursor is positioned by its sort keys, so it may itself have been
        removed since it was read.
        """
        field = ItemSortField.parse(sort_by)
        order = SortOrder.lenient(direction)
        _, size = normalize_page(1, size)
        entry = cursor if isinstance(cursor, IndexedItem) else IndexedItem.from_record(cursor)

        async with self.lock_for(scoreboard_id).read():
            ranking = self._ranking_for_read(scoreboard_id)
            if ranking is None:
                return RankedSlice(item_ids=[], total=0)
            ids = ranking.page_after(field, order, entry, size)
            return RankedSlice(item_ids=ids, total=len(ranking))
