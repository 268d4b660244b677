# src/scoreforge/services/pagination.py

"""Pagination engine for scoreboard and item listings.

Totals and the returned page are always cut from the same live set, so
``has_next_page == current_page < total_pages`` holds for every response.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from scoreforge.db.models import Scoreboard
from scoreforge.exceptions import InvalidSortDirectionError
from scoreforge.ranking.index import RankingIndex, normalize_page
from scoreforge.schemas.item import ScoreboardItemRead
from scoreforge.schemas.pagination import (
    ItemSortField,
    PaginatedResponse,
    ScoreboardSortField,
    SortOrder,
)
from scoreforge.schemas.scoreboard import ScoreboardRead
from scoreforge.services.scoreboard_service import (
    get_scoreboard,
    item_loader,
    storage_errors,
)
from scoreforge.store.entry_store import ScoreboardItemStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SCOREBOARD_COLUMNS = {
    ScoreboardSortField.CREATED_AT: Scoreboard.created_at,
    ScoreboardSortField.UPDATED_AT: Scoreboard.updated_at,
    ScoreboardSortField.NAME: Scoreboard.name,
}


def parse_sort_direction(value: str | None) -> SortOrder:
    """Parse the ``sort`` query parameter.

    Missing means ascending. Anything other than asc/desc (in any case) is a
    client error rather than being silently coerced.
    """
    if value is None or not value.strip():
        return SortOrder.ASC
    try:
        return SortOrder(value.strip().lower())
    except ValueError:
        raise InvalidSortDirectionError(value)


def count_pages(total_items: int, page_size: int) -> int:
    """ceil(total_items / page_size), 0 for an empty set."""
    return -(-total_items // page_size)


@dataclass(frozen=True)
class PageRequest:
    """Normalized list parameters."""

    page: int
    size: int
    sort: SortOrder
    sort_by: str | None = None

    @classmethod
    def from_query(
        cls,
        page: int | None = None,
        size: int | None = None,
        sort: str | None = None,
        sort_by: str | None = None,
    ) -> "PageRequest":
        page, size = normalize_page(page, size)
        return cls(page=page, size=size, sort=parse_sort_direction(sort), sort_by=sort_by)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size


def build_page(items: Sequence[T], total: int, request: PageRequest) -> PaginatedResponse[T]:
    total_pages = count_pages(total, request.size)
    return PaginatedResponse[T](
        items=list(items),
        total_pages=total_pages,
        total_items=total,
        current_page=request.page,
        page_size=request.size,
        has_next_page=request.page < total_pages,
    )


async def list_scoreboards(
    db: AsyncSession, request: PageRequest, author_id: int | None = None
) -> PaginatedResponse[ScoreboardRead]:
    """
    Return one page of live scoreboards.

    Sorted by createdAt, updatedAt or name (unknown names fall back to
    createdAt), then by id ascending.
    """
    field = ScoreboardSortField.parse(request.sort_by)
    sort_column = _SCOREBOARD_COLUMNS[field]
    if request.sort == SortOrder.DESC:
        sort_column = sort_column.desc()

    base_query = select(Scoreboard).where(Scoreboard.deleted_at.is_(None))
    if author_id is not None:
        base_query = base_query.where(Scoreboard.author_id == author_id)

    async with storage_errors(db, "list_scoreboards"):
        count_query = select(func.count()).select_from(base_query.subquery())
        total = (await db.execute(count_query)).scalar_one()
        # Past the last page; offsets this large can overflow the driver
        if request.offset >= total:
            return build_page([], total, request)

        # Id breaks ties so equal sort values page deterministically
        query = (
            base_query.order_by(sort_column, Scoreboard.id.asc())
            .offset(request.offset)
            .limit(request.size)
        )
        result = await db.execute(query)
        records = list(result.scalars().all())

    return build_page(
        [ScoreboardRead.model_validate(record) for record in records], total, request
    )


async def list_items(
    db: AsyncSession, index: RankingIndex, scoreboard_id: int, request: PageRequest
) -> PaginatedResponse[ScoreboardItemRead]:
    """
    Return one page of a live scoreboard's live items.

    The ranking index supplies the ordered ids and the live count; the
    records themselves are hydrated from the entry store.

    Raises:
        ScoreboardNotFoundError: If the scoreboard is absent or deleted.
    """
    await get_scoreboard(db, scoreboard_id)
    await index.ensure_loaded(scoreboard_id, item_loader(db, scoreboard_id))

    ranked = await index.query(
        scoreboard_id,
        sort_by=ItemSortField.parse(request.sort_by),
        direction=request.sort,
        page=request.page,
        size=request.size,
    )

    async with storage_errors(db, "list_items"):
        records = await ScoreboardItemStore(db).get_many(ranked.item_ids)

    items = []
    for item_id in ranked.item_ids:
        record = records.get(item_id)
        if record is None:
            logger.warning(
                "Ranked item missing from store",
                extra={"scoreboard_id": scoreboard_id, "item_id": item_id},
            )
            continue
        items.append(ScoreboardItemRead.model_validate(record))

    return build_page(items, ranked.total, request)
