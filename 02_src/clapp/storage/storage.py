"""SQLite key/value storage implementation."""

import json
from pathlib import Path
from typing import Any, Protocol

import aiosqlite

from ..config import resolve_db_path
from ..logging_config import get_logger

logger = get_logger(__name__)


class IStorage(Protocol):
    """Durable key/value storage for all persisted client state (SQLite)."""

    async def init(self) -> None:
        """Initialize database and create tables."""
        ...

    async def close(self) -> None:
        """Close database connection."""
        ...

    async def persist(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value under key, replacing any prior one."""
        ...

    async def retrieve(self, key: str) -> Any | None:
        """Get the value stored under key, or None if absent or unreadable."""
        ...

    async def remove(self, key: str) -> None:
        """Delete key if present."""
        ...

    async def keys(self, prefix: str = "") -> list[str]:
        """List stored keys starting with prefix."""
        ...

    async def clear(self) -> None:
        """Clear all data."""
        ...


class Storage:
    """SQLite key/value storage."""

    def __init__(self, db_path: str | Path | None = None):
        if db_path is None:
            self._db_path = resolve_db_path()
        else:
            self._db_path = resolve_db_path(db_path)
        self._conn: aiosqlite.Connection | None = None

    async def init(self) -> None:
        """Initialize database and create tables."""
        self._conn = await aiosqlite.connect(self._db_path)

        schema_path = Path(__file__).parent / "schema.sql"
        with open(schema_path, "r", encoding="utf-8") as f:
            schema_sql = f.read()
        await self._conn.executescript(schema_sql)
        await self._conn.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    async def persist(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value under key."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        await self._conn.execute(
            """
            INSERT OR REPLACE INTO kv_store (key, value, updated_at)
            VALUES (?, ?, CURRENT_TIMESTAMP)
            """,
            (key, json.dumps(value, ensure_ascii=False)),
        )
        await self._conn.commit()

    async def retrieve(self, key: str) -> Any | None:
        """Get the value stored under key."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        cursor = await self._conn.execute(
            "SELECT value FROM kv_store WHERE key = ?",
            (key,),
        )
        row = await cursor.fetchone()

        if not row:
            return None

        try:
            return json.loads(row[0])
        except (TypeError, ValueError):
            logger.warning("Discarding unreadable record %s", key)
            return None

    async def remove(self, key: str) -> None:
        """Delete key if present."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        await self._conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        await self._conn.commit()

    async def keys(self, prefix: str = "") -> list[str]:
        """List stored keys starting with prefix."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        cursor = await self._conn.execute(
            "SELECT key FROM kv_store WHERE substr(key, 1, ?) = ? ORDER BY key",
            (len(prefix), prefix),
        )
        rows = await cursor.fetchall()
        return [row[0] for row in rows]

    async def clear(self) -> None:
        """Clear all data."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        await self._conn.execute("DELETE FROM kv_store")
        await self._conn.commit()
