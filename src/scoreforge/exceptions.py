# src/scoreforge/exceptions.py

"""Custom exception hierarchy for ScoreForge.

This module provides a structured exception hierarchy that enables:
1. Proper HTTP status code mapping in API endpoints
2. Detailed error context for logging and debugging
3. Clear distinction between different error categories
"""

from __future__ import annotations


class ScoreForgeError(Exception):
    """Base exception for all ScoreForge errors.

    Attributes:
        message: Human-readable error description
        details: Optional dict with additional context for logging/debugging
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


# =============================================================================
# Resource Not Found Errors (HTTP 404)
# =============================================================================


class ResourceNotFoundError(ScoreForgeError):
    """Base class for resource not found errors."""

    pass


class RecordNotFoundError(ResourceNotFoundError):
    """Raised by the entry store when an id is absent or already purged."""

    def __init__(self, record_type: str, record_id: int) -> None:
        super().__init__(
            message=f"{record_type} with ID {record_id} not found",
            details={"record_type": record_type, "record_id": record_id},
        )


class ScoreboardNotFoundError(ResourceNotFoundError):
    """Raised when a scoreboard ID does not exist or has been deleted."""

    def __init__(self, scoreboard_id: int) -> None:
        super().__init__(
            message=f"Scoreboard with ID {scoreboard_id} not found",
            details={"scoreboard_id": scoreboard_id},
        )


class ScoreboardItemNotFoundError(ResourceNotFoundError):
    """Raised when an item does not exist, is deleted, or lives elsewhere.

    An item that belongs to a different scoreboard is reported exactly like
    a missing one so callers cannot inspect other scoreboards' contents.
    """

    def __init__(self, scoreboard_id: int, item_id: int) -> None:
        super().__init__(
            message=f"Item with ID {item_id} not found in scoreboard {scoreboard_id}",
            details={"scoreboard_id": scoreboard_id, "item_id": item_id},
        )


# =============================================================================
# Validation Errors (HTTP 400)
# =============================================================================


class ValidationError(ScoreForgeError):
    """Base class for validation errors."""

    pass


class EmptyNameError(ValidationError):
    """Raised when a scoreboard name is empty or only whitespace."""

    def __init__(self) -> None:
        super().__init__(message="Scoreboard name must not be empty")


class InvalidSortDirectionError(ValidationError):
    """Raised when the sort direction is neither 'asc' nor 'desc'."""

    def __init__(self, value: str) -> None:
        super().__init__(
            message=f"Invalid sort direction '{value}', expected 'asc' or 'desc'",
            details={"sort": value},
        )


# =============================================================================
# Authentication Errors (HTTP 401)
# =============================================================================


class UnauthorizedError(ScoreForgeError):
    """Raised when the bearer credential is missing or not recognised."""

    pass


# =============================================================================
# Storage Errors (HTTP 500)
# =============================================================================


class StorageError(ScoreForgeError):
    """Raised when the entry store fails underneath a service operation."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            message=f"Storage failure during {operation}",
            details={"operation": operation, "reason": reason},
        )
