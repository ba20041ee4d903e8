"""Key-value persistence for engine state."""
import asyncio
import json
import aiosqlite
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Protocol


# Default database location
DEFAULT_DB_PATH = Path.home() / ".auto-bookmarks" / "state.db"


class StateStore(Protocol):
    """Async key-value store the clustering engine persists into."""

    async def get(self, key: str) -> Optional[Any]:
        """Get the value stored under key, or None."""
        ...

    async def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value under key."""
        ...


class InMemoryStateStore:
    """Dict-backed store. Values are copied in and out so callers never share state."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def snapshot(self) -> Dict[str, Any]:
        """Get a copy of everything stored."""
        return {key: json.loads(raw) for key, raw in self._data.items()}


class SQLiteStateStore:
    """Async SQLite key-value store for engine state."""

    def __init__(self, db_path: Optional[Path] = None):
        """Initialize the state store.

        Args:
            db_path: Path to SQLite database. Defaults to ~/.auto-bookmarks/state.db
        """
        self.db_path = db_path or DEFAULT_DB_PATH
        self._connection: Optional[aiosqlite.Connection] = None

    async def initialize(self) -> None:
        """Initialize the database, creating tables if needed."""
        # Ensure parent directory exists
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._connection = await aiosqlite.connect(self.db_path)
        self._connection.row_factory = aiosqlite.Row

        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS engine_state (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP
            )
        """)

        await self._connection.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def get(self, key: str) -> Optional[Any]:
        """Get the value stored under a key.

        Args:
            key: State key

        Returns:
            Decoded value, or None if missing or not valid JSON
        """
        if not self._connection:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        cursor = await self._connection.execute(
            "SELECT value FROM engine_state WHERE key = ?",
            (key,)
        )
        row = await cursor.fetchone()

        if row is None:
            return None

        try:
            return json.loads(row["value"])
        except json.JSONDecodeError:
            return None

    async def set(self, key: str, value: Any) -> None:
        """Insert or replace the value stored under a key.

        Args:
            key: State key
            value: JSON-serializable value
        """
        if not self._connection:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        now = datetime.utcnow().isoformat()

        await self._connection.execute("""
            INSERT INTO engine_state (key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
        """, (key, json.dumps(value), now))

        await self._connection.commit()

    async def delete(self, key: str) -> bool:
        """Delete the value stored under a key.

        Returns:
            True if deleted, False if not found
        """
        if not self._connection:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        cursor = await self._connection.execute(
            "DELETE FROM engine_state WHERE key = ?",
            (key,)
        )
        await self._connection.commit()

        return cursor.rowcount > 0


# Global store instance
_state_store: Optional[SQLiteStateStore] = None
_state_store_lock = asyncio.Lock()


async def get_state_store(db_path: Optional[Path] = None) -> SQLiteStateStore:
    """Get or create the global state store instance.

    Args:
        db_path: Database path used when the store is first created

    Returns:
        Initialized SQLiteStateStore
    """
    global _state_store

    async with _state_store_lock:
        if _state_store is None:
            store = SQLiteStateStore(db_path)
            await store.initialize()
            _state_store = store

    return _state_store
