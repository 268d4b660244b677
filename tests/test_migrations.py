# tests/test_migrations.py

"""The Alembic history must build the same tables as the ORM models."""

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

REPO_ROOT = Path(__file__).resolve().parent.parent


def test_upgrade_head_creates_scoreboard_tables(tmp_path):
    db_path = tmp_path / "migrated.db"
    cfg = Config(str(REPO_ROOT / "alembic.ini"))
    cfg.attributes["configure_logger"] = False
    cfg.set_main_option("sqlalchemy.url", f"sqlite+aiosqlite:///{db_path}")

    command.upgrade(cfg, "head")

    sync_engine = create_engine(f"sqlite:///{db_path}")
    try:
        inspector = inspect(sync_engine)
        tables = set(inspector.get_table_names())
        assert {"scoreboards", "scoreboard_items"} <= tables

        item_columns = {c["name"] for c in inspector.get_columns("scoreboard_items")}
        assert item_columns == {
            "id",
            "scoreboard_id",
            "user_id",
            "username",
            "score",
            "created_at",
            "updated_at",
            "deleted_at",
        }
        index_names = {i["name"] for i in inspector.get_indexes("scoreboard_items")}
        assert "ix_scoreboard_items_live" in index_names
    finally:
        sync_engine.dispose()


def test_downgrade_base_drops_tables(tmp_path):
    db_path = tmp_path / "downgraded.db"
    cfg = Config(str(REPO_ROOT / "alembic.ini"))
    cfg.attributes["configure_logger"] = False
    cfg.set_main_option("sqlalchemy.url", f"sqlite+aiosqlite:///{db_path}")

    command.upgrade(cfg, "head")
    command.downgrade(cfg, "base")

    sync_engine = create_engine(f"sqlite:///{db_path}")
    try:
        tables = set(inspect(sync_engine).get_table_names())
        assert "scoreboards" not in tables
        assert "scoreboard_items" not in tables
    finally:
        sync_engine.dispose()
