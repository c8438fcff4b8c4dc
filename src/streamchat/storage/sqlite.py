"""SQLite key-value storage backend.

Provides persistent storage for preferences, history and theme in a
single SQLite database file. Uses aiosqlite for async access.
"""

import sqlite3
from pathlib import Path

import aiosqlite

from .base import KeyValueStorage, StorageError


class SQLiteStorage(KeyValueStorage):
    """SQLite-backed key-value storage.

    Every key is one row of the ``kv`` table; each write is committed
    immediately.
    """

    def __init__(self, path: str | Path):
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open the database file and create the schema."""
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._connection = await aiosqlite.connect(self._db_path)
            await self._create_schema()
        except (OSError, sqlite3.Error) as e:
            await self.disconnect()
            raise StorageError(f"Failed to open {self._db_path}: {e}") from e

    async def _create_schema(self) -> None:
        """Create database tables."""
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        await self._connection.commit()

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    def _require_connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise StorageError(f"Storage {self._db_path} is not connected")
        return self._connection

    async def get(self, key: str) -> str | None:
        connection = self._require_connection()
        try:
            async with connection.execute(
                "SELECT value FROM kv WHERE key = ?", (key,)
            ) as cursor:
                row = await cursor.fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read {key}: {e}") from e
        return row[0] if row is not None else None

    async def set(self, key: str, value: str) -> None:
        connection = self._require_connection()
        try:
            await connection.execute("""
                INSERT INTO kv (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
            """, (key, value))
            await connection.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to write {key}: {e}") from e

    async def remove(self, key: str) -> None:
        connection = self._require_connection()
        try:
            await connection.execute("DELETE FROM kv WHERE key = ?", (key,))
            await connection.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to remove {key}: {e}") from e

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path
