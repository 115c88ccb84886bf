from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import List, Optional, Union

import anysqlite

from netfirst._core._storages._base import AsyncBaseStorage
from netfirst._core._storages._packing import pack, unpack
from netfirst._core.models import CachedResponse, RequestIdentity
from netfirst._utils import ensure_cache_dict

logger = logging.getLogger("netfirst.storage")


class AsyncSqliteStorage(AsyncBaseStorage):
    """
    Persistent storage backed by a single SQLite database.

    Several workers may point at the same database file; every statement runs
    in its own transaction, which gives the per-key atomicity the cache relies on.
    """

    def __init__(
        self,
        *,
        connection: Optional[anysqlite.Connection] = None,
        database_path: Union[str, Path] = "netfirst_cache.db",
    ) -> None:
        self.connection = connection
        self.database_path: Path = database_path if isinstance(database_path, Path) else Path(database_path)
        self._initialized = False

    async def _ensure_connection(self) -> anysqlite.Connection:
        """Ensure connection is established and database is initialized."""
        if self.connection is None:
            # Create cache directory and resolve full path on first connection
            parent = self.database_path.parent if self.database_path.parent != Path(".") else None
            full_path = ensure_cache_dict(parent) / self.database_path.name
            self.connection = await anysqlite.connect(str(full_path))
        if not self._initialized:
            await self._initialize_database()
            self._initialized = True
        return self.connection

    async def _initialize_database(self) -> None:
        """Initialize the database schema."""
        assert self.connection is not None
        cursor = await self.connection.cursor()

        await cursor.execute("""
            CREATE TABLE IF NOT EXISTS generations (
                name TEXT PRIMARY KEY,
                created_at REAL NOT NULL
            )
        """)

        # One row per (generation, method, url); the status line and headers are
        # packed into `data`, the body is kept as-is.
        await cursor.execute("""
            CREATE TABLE IF NOT EXISTS entries (
                generation TEXT NOT NULL,
                method TEXT NOT NULL,
                url TEXT NOT NULL,
                data BLOB NOT NULL,
                body BLOB NOT NULL,
                created_at REAL NOT NULL,
                PRIMARY KEY (generation, method, url)
            )
        """)

        await self.connection.commit()

    async def create_generation(self, generation: str) -> None:
        connection = await self._ensure_connection()
        cursor = await connection.cursor()
        await cursor.execute(
            "INSERT OR IGNORE INTO generations (name, created_at) VALUES (?, ?)",
            (generation, time.time()),
        )
        await connection.commit()

    async def put(self, generation: str, identity: RequestIdentity, response: CachedResponse) -> None:
        connection = await self._ensure_connection()
        cursor = await connection.cursor()
        await cursor.execute(
            "INSERT OR IGNORE INTO generations (name, created_at) VALUES (?, ?)",
            (generation, time.time()),
        )
        await cursor.execute(
            "INSERT OR REPLACE INTO entries (generation, method, url, data, body, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (
                generation,
                identity.method,
                identity.url,
                pack(response),
                response.body,
                response.created_at,
            ),
        )
        await connection.commit()
        logger.debug(f"Stored {identity.method} {identity.url} in generation {generation!r}")

    async def get(self, generation: str, identity: RequestIdentity) -> Optional[CachedResponse]:
        connection = await self._ensure_connection()
        cursor = await connection.cursor()
        await cursor.execute(
            "SELECT data, body FROM entries WHERE generation = ? AND method = ? AND url = ?",
            (generation, identity.method, identity.url),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return unpack(row[0], body=bytes(row[1]))

    async def list_generations(self) -> List[str]:
        connection = await self._ensure_connection()
        cursor = await connection.cursor()
        await cursor.execute("SELECT name FROM generations ORDER BY rowid")
        return [row[0] for row in await cursor.fetchall()]

    async def delete(self, generation: str) -> bool:
        connection = await self._ensure_connection()
        cursor = await connection.cursor()
        await cursor.execute("SELECT 1 FROM generations WHERE name = ?", (generation,))
        existed = await cursor.fetchone() is not None

        await cursor.execute("DELETE FROM entries WHERE generation = ?", (generation,))
        await cursor.execute("DELETE FROM generations WHERE name = ?", (generation,))
        await connection.commit()
        return existed

    async def close(self) -> None:
        if self.connection is not None:
            await self.connection.close()
            self.connection = None
            self._initialized = False
