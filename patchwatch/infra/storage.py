"""Storage abstractions for the patches table."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from threading import Lock
from typing import Dict

from ..logging_conf import get_logger

SCHEMA = """
CREATE TABLE IF NOT EXISTS patches (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    title TEXT DEFAULT NULL,
    description TEXT DEFAULT NULL,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now'))
)
"""


class SQLiteManager:
    """Manage SQLite connections with basic schema guarantees."""

    def __init__(self) -> None:
        self._connections: Dict[Path, sqlite3.Connection] = {}
        self._lock = Lock()
        self.logger = get_logger("storage")

    def connect(self, path: Path) -> sqlite3.Connection:
        path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            if path not in self._connections:
                # Transactions are opened explicitly by callers
                conn = sqlite3.connect(path, check_same_thread=False, isolation_level=None)
                conn.row_factory = sqlite3.Row
                self._connections[path] = conn
                self.ensure_schema(conn)
            return self._connections[path]

    def ensure_schema(self, conn: sqlite3.Connection) -> bool:
        try:
            conn.execute(SCHEMA)
        except sqlite3.Error as exc:
            self.logger.error("schema_create_failed", error=str(exc))
            return False
        return True

    def close_all(self) -> None:
        with self._lock:
            for conn in self._connections.values():
                conn.close()
            self._connections.clear()


__all__ = ["SCHEMA", "SQLiteManager"]
