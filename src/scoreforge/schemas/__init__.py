# src/scoreforge/schemas/__init__.py

"""Pydantic schemas for API validation and serialization."""

from .common import CamelModel
from .item import ScoreboardItemCreate, ScoreboardItemRead
from .pagination import (
    ItemSortField,
    PaginatedResponse,
    ScoreboardSortField,
    SortOrder,
)
from .problem import ProblemDetails
from .scoreboard import ScoreboardCreate, ScoreboardRead, ScoreboardUpdate

__all__ = [
    # Common
    "CamelModel",
    "ProblemDetails",
    # Pagination
    "ItemSortField",
    "PaginatedResponse",
    "ScoreboardSortField",
    "SortOrder",
    # Scoreboard
    "ScoreboardCreate",
    "ScoreboardRead",
    "ScoreboardUpdate",
    # Scoreboard Item
    "ScoreboardItemCreate",
    "ScoreboardItemRead",
]
