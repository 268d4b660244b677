# src/scoreforge/api/item.py

"""API endpoints for the items of a scoreboard."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from scoreforge.api.deps import get_ranking_index
from scoreforge.auth import get_current_user_id
from scoreforge.db.models import ScoreboardItem
from scoreforge.db.session import get_db
from scoreforge.ranking.index import RankingIndex
from scoreforge.schemas import item as item_schema
from scoreforge.schemas.pagination import PaginatedResponse
from scoreforge.services import pagination, scoreboard_service

router = APIRouter(
    prefix="/api/scoreboards/{scoreboard_id}/items",
    tags=["Scoreboard Items"],
    dependencies=[Depends(get_current_user_id)],
)


@router.get("", response_model=PaginatedResponse[item_schema.ScoreboardItemRead])
async def read_items(
    scoreboard_id: int,
    page: int | None = Query(None, description="1-based page number"),
    size: int | None = Query(None, description="Page size, clamped to 1-100"),
    sort: str | None = Query(None, description="Sort direction (asc, desc)"),
    sort_by: str | None = Query(
        None, alias="sortBy", description="Sort field (createdAt, score, username)"
    ),
    db: AsyncSession = Depends(get_db),
    index: RankingIndex = Depends(get_ranking_index),
) -> PaginatedResponse[item_schema.ScoreboardItemRead]:
    """
    Retrieve the ranking of a scoreboard, one page at a time.

    - **page**: Page to return, starting at 1 (default 1)
    - **size**: Records per page (default 10, clamped to 1-100)
    - **sort**: Sort direction, asc or desc (default asc)
    - **sortBy**: Field to rank by; unknown fields rank by createdAt

    Ties on the sort field are always broken by item id ascending.
    """
    request = pagination.PageRequest.from_query(page, size, sort, sort_by)
    return await pagination.list_items(db, index, scoreboard_id, request)


@router.post("", response_model=item_schema.ScoreboardItemRead)
async def create_item(
    scoreboard_id: int,
    item_in: item_schema.ScoreboardItemCreate,
    db: AsyncSession = Depends(get_db),
    index: RankingIndex = Depends(get_ranking_index),
) -> ScoreboardItem:
    """
    Submit a score into a scoreboard.

    - **userId**: Id of the user the score belongs to
    - **username**: Display name, stored as a snapshot
    - **score**: Signed 32-bit score

    Raises:
        404 Not Found: If the scoreboard doesn't exist or was deleted.
    """
    return await scoreboard_service.create_item(
        db,
        index,
        scoreboard_id,
        user_id=item_in.user_id,
        username=item_in.username,
        score=item_in.score,
    )


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    scoreboard_id: int,
    item_id: int,
    db: AsyncSession = Depends(get_db),
    index: RankingIndex = Depends(get_ranking_index),
) -> None:
    """
    Soft-delete an item.

    Raises:
        404 Not Found: If the item doesn't exist in this scoreboard or was
            already deleted.
    """
    await scoreboard_service.delete_item(db, index, scoreboard_id, item_id)
    return None
