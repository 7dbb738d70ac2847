"""SQLite-backed key-value cache for reference data and order history."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from quickorder.config import CACHE_DB_PATH

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class LocalCache:
    """A single shared key-value space; values are JSON text written whole.

    Each loader owns its own keys, so the only rule is last write per key wins.
    """

    def __init__(self, db_path: str | Path = CACHE_DB_PATH) -> None:
        self.db_path = Path(db_path)
        self.bootstrap_schema()

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(self.db_path)

    def bootstrap_schema(self) -> None:
        """Create the cache table if it does not already exist."""
        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS cache_entries (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
                """
            )
            columns = {row[1] for row in conn.execute("PRAGMA table_info(cache_entries)")}
            if "updated_at" not in columns:
                conn.execute("ALTER TABLE cache_entries ADD COLUMN updated_at TEXT NOT NULL DEFAULT ''")

    def get(self, key: str) -> str | None:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM cache_entries WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        return str(row[0])

    def set(self, key: str, value: str) -> None:
        with self._connect() as conn:
            with conn:
                conn.execute(
                    """
                    INSERT INTO cache_entries (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                    """,
                    (key, value, _utc_now_iso()),
                )

    def remove(self, key: str) -> None:
        with self._connect() as conn:
            with conn:
                conn.execute("DELETE FROM cache_entries WHERE key = ?", (key,))

    def clear(self) -> None:
        """Drop every cached value (used on reset/logout)."""
        with self._connect() as conn:
            with conn:
                conn.execute("DELETE FROM cache_entries")
        logger.info("cache cleared path=%s", self.db_path)

    def get_json(self, key: str) -> Any:
        """Return the decoded value, or None when the key is absent.

        Raises ``ValueError`` when the stored text is not valid JSON.
        """
        raw = self.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set_json(self, key: str, value: Any) -> None:
        self.set(key, json.dumps(value, ensure_ascii=False))
