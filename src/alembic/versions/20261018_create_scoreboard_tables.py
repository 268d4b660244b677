"""Create scoreboards and scoreboard_items tables

Revision ID: 20261018_scoreboards
Revises:
Create Date: 2026-10-18

This migration creates:
- scoreboards, with soft delete support
- scoreboard_items, keyed to their scoreboard
- Indexes on author_id, scoreboard_id, user_id, and the
  (scoreboard_id, deleted_at) pair used to rebuild rankings

Both tables use AUTOINCREMENT on SQLite so ids of purged rows are never
handed out again.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261018_scoreboards"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the scoreboard tables and their indexes."""
    op.create_table(
        "scoreboards",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_scoreboards_author_id", "scoreboards", ["author_id"])

    op.create_table(
        "scoreboard_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "scoreboard_id",
            sa.Integer(),
            sa.ForeignKey("scoreboards.id"),
            nullable=False,
        ),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(length=255), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sqlite_autoincrement=True,
    )
    op.create_index(
        "ix_scoreboard_items_scoreboard_id", "scoreboard_items", ["scoreboard_id"]
    )
    op.create_index("ix_scoreboard_items_user_id", "scoreboard_items", ["user_id"])
    op.create_index(
        "ix_scoreboard_items_live", "scoreboard_items", ["scoreboard_id", "deleted_at"]
    )


def downgrade() -> None:
    """Drop the scoreboard tables."""
    op.drop_index("ix_scoreboard_items_live", table_name="scoreboard_items")
    op.drop_index("ix_scoreboard_items_user_id", table_name="scoreboard_items")
    op.drop_index("ix_scoreboard_items_scoreboard_id", table_name="scoreboard_items")
    op.drop_table("scoreboard_items")
    op.drop_index("ix_scoreboards_author_id", table_name="scoreboards")
    op.drop_table("scoreboards")
