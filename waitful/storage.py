"""
Local key/value store — SQLite-backed "local" storage area.

Holds the append-only pause logs and per-site visit stats. Values are JSON
documents addressed by key; callers do their own read-merge-write, and two
writers racing on the same key resolve as last-write-wins.
"""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator

# Keys owned by the interception agent.
PAUSE_LOGS = "pauseLogs"
SITE_HISTORY = "siteHistory"
SITE_STATS = "siteStats"


class LocalStore:
    """Connection-per-call SQLite store, safe to share between contexts."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._init_db()

    def get(self, keys: Iterable[str]) -> Dict[str, Any]:
        """Return the stored values for *keys*; missing keys are omitted."""
        keys = list(keys)
        if not keys:
            return {}
        marks = ", ".join("?" for _ in keys)
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT key, value_json FROM kv WHERE key IN ({marks})", keys
            ).fetchall()
        return {key: json.loads(value) for key, value in rows}

    def set(self, items: Dict[str, Any]) -> None:
        with self._conn() as conn:
            conn.executemany(
                "INSERT INTO kv (key, value_json) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value_json = excluded.value_json",
                [(k, json.dumps(v)) for k, v in items.items()],
            )

    def remove(self, keys: Iterable[str]) -> None:
        with self._conn() as conn:
            conn.executemany("DELETE FROM kv WHERE key = ?", [(k,) for k in keys])

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _init_db(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._conn() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key        TEXT PRIMARY KEY,
                    value_json TEXT NOT NULL
                )
                """
            )

    @contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()
