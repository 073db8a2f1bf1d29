"""
Key-value stores for small persisted documents (learned expiry offsets).

Stores hold whole JSON documents under a key. Callers read-modify-write the
document; there are no partial updates.

Failures surface as StorageError so callers can tell "no value" from
"couldn't read".
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Protocol

import aiosqlite

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """The backing store could not be read or written."""


class KeyValueStore(Protocol):
    """Async string key-value store."""

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...


class MemoryKeyValueStore:
    """In-process store. Contents are lost on restart."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value


class SqliteKeyValueStore:
    """SQLite-backed store, opened at startup or on first use."""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        self.db: Optional[aiosqlite.Connection] = None
        self._init_lock = asyncio.Lock()

    async def init(self):
        """Open the database and create the table. Safe to call more than once."""
        async with self._init_lock:
            if self.db is not None:
                return

            db = None
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                db = await aiosqlite.connect(self.db_path)
                await db.executescript("""
                    CREATE TABLE IF NOT EXISTS kv_store (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );
                """)
                await db.commit()
            except (aiosqlite.Error, OSError) as e:
                if db is not None:
                    await db.close()
                raise StorageError(f"Cannot open key-value store at {self.db_path}: {e}") from e

            self.db = db
            logger.info(f"Key-value store initialized at {self.db_path}")

    async def close(self):
        async with self._init_lock:
            if self.db:
                await self.db.close()
                self.db = None

    async def _connection(self) -> aiosqlite.Connection:
        if self.db is None:
            await self.init()
        return self.db

    async def get(self, key: str) -> Optional[str]:
        db = await self._connection()
        try:
            cursor = await db.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StorageError(f"Read failed for {key}: {e}") from e
        return row[0] if row else None

    async def set(self, key: str, value: str) -> None:
        db = await self._connection()
        try:
            await db.execute(
                """
                INSERT INTO kv_store (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (key, value),
            )
            await db.commit()
        except aiosqlite.Error as e:
            raise StorageError(f"Write failed for {key}: {e}") from e
