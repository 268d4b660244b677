# src/scoreforge/schemas/item.py

"""Pydantic schemas for the ScoreboardItem resource.

The owning scoreboard id is part of the URL, so it is never echoed back in
the payload.
"""

from datetime import datetime

from pydantic import Field

from .common import CamelModel

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


class ScoreboardItemCreate(CamelModel):
    """Properties to receive via API when submitting a score."""

    user_id: int
    username: str
    score: int = Field(..., ge=INT32_MIN, le=INT32_MAX, description="Signed 32-bit score")


class ScoreboardItemRead(CamelModel):
    """Properties to return to the client for a scored entry."""

    id: int
    user_id: int
    username: str
    score: int
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None
