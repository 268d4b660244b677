# tests/test_api_items.py

"""Integration tests for the /api/scoreboards/{id}/items endpoints."""

import pytest
from httpx import AsyncClient

# =============================================================================
# Helper Functions
# =============================================================================


async def create_board(client: AsyncClient, name: str = "Board") -> int:
    """Helper to create a scoreboard and return its ID."""
    response = await client.post("/api/scoreboards", json={"name": name})
    assert response.status_code == 200
    return response.json()["id"]


async def submit(
    client: AsyncClient, board_id: int, score: int, username: str = "player", user_id: int = 1
) -> dict:
    """Helper to submit a score and return the created item."""
    response = await client.post(
        f"/api/scoreboards/{board_id}/items",
        json={"userId": user_id, "username": username, "score": score},
    )
    assert response.status_code == 200
    return response.json()


async def list_items(client: AsyncClient, board_id: int, **params) -> dict:
    response = await client.get(f"/api/scoreboards/{board_id}/items", params=params)
    assert response.status_code == 200
    return response.json()


# =============================================================================
# Create
# =============================================================================


@pytest.mark.asyncio
async def test_submit_item(async_client: AsyncClient):
    board_id = await create_board(async_client)

    data = await submit(async_client, board_id, 1500, username="alice", user_id=9)

    assert data["userId"] == 9
    assert data["username"] == "alice"
    assert data["score"] == 1500
    assert data["createdAt"] == data["updatedAt"]
    assert data["deletedAt"] is None
    assert "scoreboardId" not in data


@pytest.mark.asyncio
async def test_submit_item_to_missing_scoreboard(async_client: AsyncClient):
    response = await async_client.post(
        "/api/scoreboards/999999/items",
        json={"userId": 1, "username": "a", "score": 1},
    )

    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("score", [-(2**31), 0, 2**31 - 1])
async def test_score_accepts_full_int32_range(async_client: AsyncClient, score: int):
    board_id = await create_board(async_client)

    data = await submit(async_client, board_id, score)

    assert data["score"] == score


# =============================================================================
# Ranking
# =============================================================================


@pytest.mark.asyncio
async def test_worked_example(async_client: AsyncClient):
    """Scores 10, 30, 20 by score desc with size 2: [30, 20] then [10]."""
    board_id = await create_board(async_client)
    for score in [10, 30, 20]:
        await submit(async_client, board_id, score)

    first = await list_items(async_client, board_id, page=1, size=2, sort="desc", sortBy="score")
    second = await list_items(async_client, board_id, page=2, size=2, sort="desc", sortBy="score")

    assert [i["score"] for i in first["items"]] == [30, 20]
    assert first["totalItems"] == 3
    assert first["totalPages"] == 2
    assert first["hasNextPage"] is True
    assert [i["score"] for i in second["items"]] == [10]
    assert second["hasNextPage"] is False


@pytest.mark.asyncio
async def test_equal_scores_tie_break_on_id(async_client: AsyncClient):
    board_id = await create_board(async_client)
    ids = [(await submit(async_client, board_id, 100))["id"] for _ in range(3)]

    desc = await list_items(async_client, board_id, sort="desc", sortBy="score")
    asc = await list_items(async_client, board_id, sort="asc", sortBy="score")

    assert [i["id"] for i in desc["items"]] == ids
    assert [i["id"] for i in asc["items"]] == ids


@pytest.mark.asyncio
async def test_default_order_is_oldest_first(async_client: AsyncClient):
    board_id = await create_board(async_client)
    ids = [(await submit(async_client, board_id, s))["id"] for s in [3, 1, 2]]

    data = await list_items(async_client, board_id)

    assert [i["id"] for i in data["items"]] == ids
    assert data["pageSize"] == 10


@pytest.mark.asyncio
async def test_username_sort_and_unknown_field_fallback(async_client: AsyncClient):
    board_id = await create_board(async_client)
    bob = await submit(async_client, board_id, 1, username="bob")
    alice = await submit(async_client, board_id, 2, username="alice")

    by_name = await list_items(async_client, board_id, sortBy="username")
    fallback = await list_items(async_client, board_id, sortBy="rating")

    assert [i["id"] for i in by_name["items"]] == [alice["id"], bob["id"]]
    assert [i["id"] for i in fallback["items"]] == [bob["id"], alice["id"]]


@pytest.mark.asyncio
async def test_scoreboards_rank_independently(async_client: AsyncClient):
    first = await create_board(async_client, "First")
    second = await create_board(async_client, "Second")
    await submit(async_client, first, 5)
    await submit(async_client, second, 6)
    await submit(async_client, second, 7)

    assert (await list_items(async_client, first))["totalItems"] == 1
    assert (await list_items(async_client, second))["totalItems"] == 2


# =============================================================================
# Delete
# =============================================================================


@pytest.mark.asyncio
async def test_delete_item(async_client: AsyncClient):
    board_id = await create_board(async_client)
    keep = await submit(async_client, board_id, 10)
    drop = await submit(async_client, board_id, 20)

    response = await async_client.delete(f"/api/scoreboards/{board_id}/items/{drop['id']}")
    assert response.status_code == 204

    data = await list_items(async_client, board_id)
    assert [i["id"] for i in data["items"]] == [keep["id"]]
    assert data["totalItems"] == 1

    again = await async_client.delete(f"/api/scoreboards/{board_id}/items/{drop['id']}")
    assert again.status_code == 404


@pytest.mark.asyncio
async def test_delete_item_through_wrong_scoreboard(async_client: AsyncClient):
    owner = await create_board(async_client, "Owner")
    other = await create_board(async_client, "Other")
    item = await submit(async_client, owner, 10)

    response = await async_client.delete(f"/api/scoreboards/{other}/items/{item['id']}")

    assert response.status_code == 404
    assert (await list_items(async_client, owner))["totalItems"] == 1


@pytest.mark.asyncio
async def test_delete_keeps_pages_consistent(async_client: AsyncClient):
    """Totals and page contents always come from the same live set."""
    board_id = await create_board(async_client)
    items = [await submit(async_client, board_id, s) for s in range(5)]
    await async_client.delete(f"/api/scoreboards/{board_id}/items/{items[1]['id']}")

    pages = [await list_items(async_client, board_id, page=p, size=2) for p in (1, 2, 3)]

    seen = [i["id"] for page in pages for i in page["items"]]
    assert seen == [items[i]["id"] for i in (0, 2, 3, 4)]
    assert all(page["totalItems"] == 4 for page in pages)
    assert all(page["totalPages"] == 2 for page in pages)
    assert pages[2]["items"] == []
    assert [page["hasNextPage"] for page in pages] == [True, False, False]
