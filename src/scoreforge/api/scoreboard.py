# src/scoreforge/api/scoreboard.py

"""API endpoints for managing scoreboards."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from scoreforge.api.deps import get_ranking_index
from scoreforge.auth import get_current_user_id
from scoreforge.db.models import Scoreboard
from scoreforge.db.session import get_db
from scoreforge.ranking.index import RankingIndex
from scoreforge.schemas import scoreboard as scoreboard_schema
from scoreforge.schemas.pagination import PaginatedResponse
from scoreforge.services import pagination, scoreboard_service

# Every route here requires a bearer credential
router = APIRouter(
    prefix="/api/scoreboards",
    tags=["Scoreboards"],
    dependencies=[Depends(get_current_user_id)],
)


@router.get("", response_model=PaginatedResponse[scoreboard_schema.ScoreboardRead])
async def read_scoreboards(
    page: int | None = Query(None, description="1-based page number"),
    size: int | None = Query(None, description="Page size, clamped to 1-100"),
    sort: str | None = Query(None, description="Sort direction (asc, desc)"),
    sort_by: str | None = Query(
        None, alias="sortBy", description="Sort field (createdAt, updatedAt, name)"
    ),
    author_id: int | None = Query(None, alias="authorId", description="Filter by author"),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[scoreboard_schema.ScoreboardRead]:
    """
    Retrieve a paginated list of live scoreboards.

    - **page**: Page to return, starting at 1 (default 1)
    - **size**: Records per page (default 10, clamped to 1-100)
    - **sort**: Sort direction, asc or desc (default asc)
    - **sortBy**: Field to sort by; unknown fields sort by createdAt
    - **authorId**: Only return scoreboards created by this user
    """
    request = pagination.PageRequest.from_query(page, size, sort, sort_by)
    return await pagination.list_scoreboards(db, request, author_id=author_id)


@router.post("", response_model=scoreboard_schema.ScoreboardRead)
async def create_scoreboard(
    scoreboard_in: scoreboard_schema.ScoreboardCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Scoreboard:
    """
    Create a new scoreboard owned by the calling user.

    - **name**: Display name of the scoreboard (must not be blank).
    """
    return await scoreboard_service.create_scoreboard(db, user_id, scoreboard_in.name)


@router.get("/{scoreboard_id}", response_model=scoreboard_schema.ScoreboardRead)
async def read_scoreboard(
    scoreboard_id: int, db: AsyncSession = Depends(get_db)
) -> Scoreboard:
    """
    Retrieve a single live scoreboard by its ID.
    """
    return await scoreboard_service.get_scoreboard(db, scoreboard_id)


@router.put("/{scoreboard_id}", response_model=scoreboard_schema.ScoreboardRead)
async def update_scoreboard(
    scoreboard_id: int,
    scoreboard_in: scoreboard_schema.ScoreboardUpdate,
    db: AsyncSession = Depends(get_db),
) -> Scoreboard:
    """
    Rename a scoreboard.

    Raises:
        404 Not Found: If the scoreboard doesn't exist or was deleted.
    """
    return await scoreboard_service.update_scoreboard(
        db, scoreboard_id, scoreboard_in.name
    )


@router.delete("/{scoreboard_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_scoreboard(
    scoreboard_id: int,
    db: AsyncSession = Depends(get_db),
    index: RankingIndex = Depends(get_ranking_index),
) -> None:
    """
    Soft-delete a scoreboard. Its items stop appearing in listings.

    Raises:
        404 Not Found: If the scoreboard doesn't exist or was already deleted.
    """
    await scoreboard_service.delete_scoreboard(db, index, scoreboard_id)
    return None
