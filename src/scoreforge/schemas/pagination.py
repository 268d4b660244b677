# src/scoreforge/schemas/pagination.py

"""Pagination schemas and sort enumerations for list endpoints."""

from __future__ import annotations

from enum import Enum
from typing import Generic, TypeVar

from pydantic import Field

from .common import CamelModel

T = TypeVar("T")


class SortOrder(str, Enum):
    """Sort order for list endpoints."""

    ASC = "asc"
    DESC = "desc"

    @classmethod
    def lenient(cls, value: "str | SortOrder | None") -> "SortOrder":
        """Parse a direction, treating anything unrecognised as ASC."""
        if isinstance(value, SortOrder):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.ASC


class _FallbackSortField(str, Enum):
    """A closed set of sort fields with a default for unknown names.

    The first declared member is the default.
    """

    @classmethod
    def fallback(cls) -> "_FallbackSortField":
        return next(iter(cls))

    @classmethod
    def parse(cls, value: "str | None") -> "_FallbackSortField":
        """Resolve camelCase or snake_case names, else return the fallback."""
        if isinstance(value, cls):
            return value
        if value:
            for member in cls:
                if value in (member.value, member.name.lower()):
                    return member
        return cls.fallback()


class ItemSortField(_FallbackSortField):
    """Sortable fields for scoreboard items (mirrored in the ranking index)."""

    CREATED_AT = "createdAt"
    SCORE = "score"
    USERNAME = "username"


class ScoreboardSortField(_FallbackSortField):
    """Sortable fields for scoreboards."""

    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    NAME = "name"


class PaginatedResponse(CamelModel, Generic[T]):
    """Standard paginated response wrapper.

    Attributes:
        items: Records on the current page
        total_pages: ceil(total_items / page_size), 0 when there are no items
        total_items: Live records matching the request
        current_page: The (1-based) page that was requested
        page_size: Maximum number of records per page
        has_next_page: current_page < total_pages
    """

    items: list[T]
    total_pages: int = Field(..., ge=0, description="Number of pages")
    total_items: int = Field(..., ge=0, description="Total live records")
    current_page: int = Field(..., ge=1, description="Requested page (1-based)")
    page_size: int = Field(..., ge=1, description="Max records per page")
    has_next_page: bool = Field(..., description="A later page exists")
