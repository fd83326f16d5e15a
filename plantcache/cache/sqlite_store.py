"""CacheStore implementation backed by a local SQLite database."""

from __future__ import annotations

import asyncio
import sqlite3
import threading
from pathlib import Path

from plantcache.cache.models import CacheNamespace

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS entries (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class SQLiteCacheStore:
    """CacheStore using SQLite with WAL mode.

    Blocking sqlite calls run in a worker thread via ``asyncio.to_thread``
    so the event loop keeps serving other renders. A lock serialises access
    to the shared connection.
    """

    def __init__(self, db_path: str = "~/.plantcache/cache.db") -> None:
        path = Path(db_path).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)

        self.db_path = str(path)
        self._lock = threading.Lock()
        # isolation_level=None => autocommit; each statement is its own write.
        self._conn = sqlite3.connect(
            self.db_path, isolation_level=None, timeout=5, check_same_thread=False
        )
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    # -- sync helpers ----------------------------------------------------------

    def _get(self, key: str) -> str | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM entries WHERE key = ?", (key,)
            ).fetchone()
        return row[0] if row else None

    def _set(self, key: str, value: str) -> None:
        with self._lock:
            self._conn.execute(
                "INSERT INTO entries (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )

    def _stats(self) -> dict[str, int]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT substr(key, 1, instr(key, '-') - 1) AS ns, COUNT(*) "
                "FROM entries GROUP BY ns"
            ).fetchall()
        counts = {ns.value: 0 for ns in CacheNamespace}
        for ns, count in rows:
            if ns in counts:
                counts[ns] = count
        return counts

    def _prune(self, cutoff_ms: int) -> list[str]:
        prefix = f"{CacheNamespace.ts.value}-"
        with self._lock:
            cursor = self._conn.cursor()
            try:
                cursor.execute("BEGIN IMMEDIATE")
                rows = cursor.execute(
                    "SELECT key, value FROM entries WHERE key LIKE ?",
                    (prefix + "%",),
                ).fetchall()
                stale = [
                    key[len(prefix):]
                    for key, value in rows
                    if value.isdigit() and int(value) < cutoff_ms
                ]
                for diagram_key in stale:
                    cursor.executemany(
                        "DELETE FROM entries WHERE key = ?",
                        [(f"{ns.value}-{diagram_key}",) for ns in CacheNamespace],
                    )
                cursor.execute("COMMIT")
            except Exception:
                self._conn.rollback()
                raise
        return stale

    # -- CacheStore protocol ---------------------------------------------------

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._get, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set, key, value)

    # -- extras ----------------------------------------------------------------

    async def stats(self) -> dict[str, int]:
        """Count entries grouped by namespace."""
        return await asyncio.to_thread(self._stats)

    async def prune(self, cutoff_ms: int) -> list[str]:
        """Delete every entry whose access timestamp is older than ``cutoff_ms``.

        Returns the diagram keys that were evicted. Entries without a
        timestamp are left alone.
        """
        return await asyncio.to_thread(self._prune, cutoff_ms)

    def close(self) -> None:
        with self._lock:
            self._conn.close()
