# src/scoreforge/config.py

"""Runtime configuration read from environment variables."""

import logging
import os

# Log level for the root logger, applied by configure_logging()
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Entry store connection; SQLite is the development default
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./scoreforge.db")
DB_ECHO = os.getenv("DB_ECHO", "false").lower() == "true"
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "20"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "10"))
DB_POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "3600"))
# Seconds a SQLite writer waits on a locked database before giving up
DB_SQLITE_BUSY_TIMEOUT = float(os.getenv("DB_SQLITE_BUSY_TIMEOUT", "30"))

# Pagination bounds shared by every list endpoint
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# Sort fields that get a maintained ordering in the ranking index.
# Any other supported field is answered by scanning the live entries.
INDEXED_SORT_FIELDS = [
    field.strip()
    for field in os.getenv(
        "SCOREFORGE_INDEXED_SORT_FIELDS", "createdAt,score,username"
    ).split(",")
    if field.strip()
]

# Tombstone sweeper: rows deleted longer ago than the retention window are
# physically purged. An interval of 0 disables the sweeper.
TOMBSTONE_RETENTION_DAYS = int(os.getenv("SCOREFORGE_TOMBSTONE_RETENTION_DAYS", "30"))
PURGE_INTERVAL_SECONDS = float(os.getenv("SCOREFORGE_PURGE_INTERVAL_SECONDS", "0"))

# Create tables on startup instead of relying on Alembic (local development)
AUTO_CREATE_TABLES = os.getenv("SCOREFORGE_AUTO_CREATE_TABLES", "false").lower() == "true"


def _parse_api_tokens(raw: str) -> dict[str, int]:
    """Parse 'token:user_id' pairs separated by commas."""
    tokens: dict[str, int] = {}
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        token, _, user_id = pair.rpartition(":")
        if not token or not user_id.isdigit():
            raise ValueError(f"Malformed SCOREFORGE_API_TOKENS entry: {pair!r}")
        tokens[token] = int(user_id)
    return tokens


# Static bearer token table used by the bundled auth dependency
API_TOKENS = _parse_api_tokens(os.getenv("SCOREFORGE_API_TOKENS", ""))


def configure_logging() -> None:
    """Apply LOG_LEVEL to the root logger and install a basic handler."""
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
