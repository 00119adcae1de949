# cico_bot/models/sqlite_store.py
"""
SQLite-backed user settings persistence.

Async CRUD with WAL mode and IMMEDIATE transactions. Values are stored as
JSON so rows written by older bot versions (bare token strings) stay readable.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiosqlite

from cico_bot.models.schema import init_db
from cico_bot.models.settings import UserSettings
from cico_bot.models.store import SettingsStore

logger = logging.getLogger(__name__)


class SQLiteSettingsStore(SettingsStore):
    """
    Async SQLite-backed settings storage.

    Features:
        - WAL mode for concurrent reads/writes
        - IMMEDIATE transactions for write safety
        - No persistent connections (avoids resource leaks)
    """

    def __init__(self, db_path: str) -> None:
        """
        Initialize SQLite settings store.

        Args:
            db_path: Path to SQLite database file
        """
        self._db_path = db_path
        logger.info(f"Created SQLiteSettingsStore with path: {db_path}")

    async def initialize(self) -> None:
        """Initialize database schema."""
        await init_db(self._db_path)

    async def get(self, user_id: int | str) -> UserSettings:
        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute(
                "SELECT value FROM user_settings WHERE user_id = ?", (str(user_id),)
            )
            row = await cursor.fetchone()

        if not row:
            return UserSettings()
        return UserSettings.from_stored(json.loads(row[0]))

    async def put(self, user_id: int | str, settings: UserSettings) -> None:
        await self.put_raw(user_id, settings.to_stored())

    async def put_raw(self, user_id: int | str, value: Any) -> None:
        """
        Store a value exactly as given (used for legacy imports and tests).

        Args:
            user_id: Messaging user identifier
            value: JSON-serializable stored shape
        """
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute("BEGIN IMMEDIATE")
            try:
                await db.execute(
                    """
                    INSERT INTO user_settings (user_id, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(user_id) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (
                        str(user_id),
                        json.dumps(value),
                        datetime.now(timezone.utc).isoformat(),
                    ),
                )
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        logger.info(f"Stored settings for user {user_id}")

    async def list_all(self) -> dict[str, UserSettings]:
        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute("SELECT user_id, value FROM user_settings ORDER BY user_id")
            rows = await cursor.fetchall()

        return {row[0]: UserSettings.from_stored(json.loads(row[1])) for row in rows}

    async def close(self) -> None:
        """
        Checkpoint WAL.

        Truncates WAL file to avoid unbounded growth.
        """
        try:
            async with aiosqlite.connect(self._db_path) as db:
                await db.execute("PRAGMA wal_checkpoint(TRUNCATE)")
                logger.info("WAL checkpoint completed")
        except Exception as e:
            logger.warning(f"WAL checkpoint failed: {e}")


async def import_json_database(store: SettingsStore, path: str | Path) -> int:
    """
    Import a JSON settings file (user id -> token string or settings object).

    Every entry is normalized before it is written, so the store only ever
    receives the canonical shape.

    Args:
        store: Destination store
        path: JSON file path

    Returns:
        Number of users imported

    Raises:
        ValueError: If the file does not contain a JSON object
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a JSON object")

    count = 0
    for user_id, value in data.items():
        try:
            settings = UserSettings.from_stored(value)
        except TypeError as e:
            logger.warning(f"Skipping user {user_id}: {e}")
            continue
        await store.put(user_id, settings)
        count += 1

    logger.info(f"Imported {count} user(s) from {path}")
    return count
