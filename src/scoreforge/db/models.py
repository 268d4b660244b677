# src/scoreforge/db/models.py

"""Database models for the ScoreForge application."""

from __future__ import annotations

import enum
import threading
from datetime import datetime, timedelta, timezone
from typing import List

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import (
    Mapped,
    declarative_base,
    mapped_column,
    relationship,
)

Base = declarative_base()


# ===============================================
# Clock
# ===============================================

_clock_lock = threading.Lock()
_last_timestamp = datetime.min.replace(tzinfo=timezone.utc)


def utcnow() -> datetime:
    """Return the current UTC time, strictly increasing across calls.

    Two records written in the same microsecond still get distinct
    timestamps, so ordering by created_at agrees with write order.
    """
    global _last_timestamp
    with _clock_lock:
        now = datetime.now(timezone.utc)
        if now <= _last_timestamp:
            now = _last_timestamp + timedelta(microseconds=1)
        _last_timestamp = now
        return now


# ===============================================
# Mixins for Common Columns
# ===============================================


class RecordStatus(str, enum.Enum):
    """Lifecycle state of a stored record. DELETED is terminal."""

    ACTIVE = "active"
    DELETED = "deleted"


class TimestampMixin:
    """Mixin providing created_at and updated_at timestamp columns.

    Both are assigned by the entry store rather than by column defaults so
    that a rename touches updated_at only.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )


class SoftDeleteMixin:
    """Mixin providing soft delete support via deleted_at column."""

    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None, nullable=True
    )

    @property
    def is_deleted(self) -> bool:
        """Check if this record has been soft-deleted."""
        return self.deleted_at is not None

    @property
    def status(self) -> RecordStatus:
        return RecordStatus.DELETED if self.is_deleted else RecordStatus.ACTIVE


# ===============================================
# Core Tables: Scoreboard and ScoreboardItem
# ===============================================


class Scoreboard(Base, TimestampMixin, SoftDeleteMixin):
    """A named ranking owned by a single author.

    Attributes:
        author_id: Id of the external user who created the scoreboard.
    """

    __tablename__ = "scoreboards"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    author_id: Mapped[int] = mapped_column(nullable=False, index=True)

    # Items are never removed with their scoreboard; deletion is a tombstone
    items: Mapped[List["ScoreboardItem"]] = relationship(
        back_populates="scoreboard", passive_deletes=True
    )

    # AUTOINCREMENT keeps SQLite from reusing ids of purged rows
    __table_args__ = {"sqlite_autoincrement": True}


class ScoreboardItem(Base, TimestampMixin, SoftDeleteMixin):
    """A single scored entry submitted into a scoreboard.

    Attributes:
        username: Snapshot of the user's name at submission time; never
            re-synced from the user record.
        score: Signed 32-bit score.
    """

    __tablename__ = "scoreboard_items"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    scoreboard_id: Mapped[int] = mapped_column(
        ForeignKey("scoreboards.id"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(nullable=False, index=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False)

    scoreboard: Mapped["Scoreboard"] = relationship(back_populates="items")

    __table_args__ = (
        # Rebuilding a scoreboard's projection scans its live items only
        Index("ix_scoreboard_items_live", "scoreboard_id", "deleted_at"),
        {"sqlite_autoincrement": True},
    )
