# src/scoreforge/schemas/scoreboard.py

"""Pydantic schemas for the Scoreboard resource."""

from datetime import datetime

from .common import CamelModel


# ===============================================
# Create / Update Schemas
# ===============================================
class ScoreboardCreate(CamelModel):
    """Properties to receive via API on create."""

    name: str


class ScoreboardUpdate(CamelModel):
    """Properties to receive via API on rename."""

    name: str


# ===============================================
# Read Schema
# ===============================================
class ScoreboardRead(CamelModel):
    """Properties to return to the client."""

    id: int
    name: str
    author_id: int
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None
