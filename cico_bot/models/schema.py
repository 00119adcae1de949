# cico_bot/models/schema.py
"""
Database schema definition for SQLite settings persistence.

Provides DDL and schema initialization.
"""

import logging

import aiosqlite

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

# value holds JSON: a settings object, or a legacy bare token string
USER_SETTINGS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS user_settings (
    user_id TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

SCHEMA_VERSION_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER NOT NULL
)
"""


async def _get_schema_version(db: aiosqlite.Connection) -> int:
    """
    Get current schema version from database.

    Returns:
        Schema version (0 if no version row exists)
    """
    try:
        cursor = await db.execute("SELECT version FROM schema_version LIMIT 1")
        row = await cursor.fetchone()
        return row[0] if row else 0
    except aiosqlite.OperationalError:
        return 0


async def init_db(db_path: str) -> None:
    """
    Create tables (idempotent) and enable WAL mode.

    Args:
        db_path: Path to SQLite database file
    """
    async with aiosqlite.connect(db_path) as db:
        await db.execute("PRAGMA journal_mode=WAL")
        await db.execute(USER_SETTINGS_TABLE_SQL)
        await db.execute(SCHEMA_VERSION_TABLE_SQL)

        version = await _get_schema_version(db)
        if version == 0:
            await db.execute("INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
            logger.info(f"Initialized settings schema v{SCHEMA_VERSION} at {db_path}")

        await db.commit()
