"""Deduplicating patch store backed by a SQLite uniqueness constraint."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from ..config import DEFAULT_RECENT_LIMIT
from ..errors import QueryError
from ..infra.storage import SQLiteManager
from ..logging_conf import get_logger
from .extractor import CandidateRecord

INSERT_SQL = "INSERT INTO patches(name, title, description) VALUES (?, ?, ?)"
RECENT_SQL = (
    "SELECT name, title, description, created_at FROM patches "
    "ORDER BY created_at DESC, id DESC LIMIT ?"
)
MAX_RECENT_LIMIT = 1000


class InsertStatus(str, Enum):
    INSERTED = "inserted"
    ALREADY_EXISTS = "already_exists"
    FAILED = "failed"


@dataclass(slots=True)
class InsertResult:
    """Outcome of one insertion attempt."""

    status: InsertStatus
    error: Exception | None = None

    @property
    def inserted(self) -> bool:
        return self.status is InsertStatus.INSERTED


@dataclass(slots=True, frozen=True)
class PatchRecord:
    """A persisted patch row."""

    name: str
    title: str
    description: str
    created_at: datetime


def coerce_limit(value: Any, default: int = DEFAULT_RECENT_LIMIT) -> int:
    """Return a positive row limit capped at ``MAX_RECENT_LIMIT``.

    Absent, non-numeric and non-positive input falls back to ``default``.
    """

    if value is None or isinstance(value, bool):
        return default
    try:
        limit = int(str(value).strip())
    except ValueError:
        return default
    if limit <= 0:
        return default
    return min(limit, MAX_RECENT_LIMIT)


def _parse_timestamp(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        value = raw
    else:
        value = datetime.fromisoformat(str(raw))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _is_unique_violation(exc: sqlite3.IntegrityError) -> bool:
    return "UNIQUE" in str(exc).upper()


class PatchStore:
    """Insert-if-absent and most-recent queries over the ``patches`` table.

    Each insertion runs in its own transaction. Duplicates are detected by the
    database constraint rather than a pre-read, so concurrent writers cannot
    race between a check and an insert.
    """

    def __init__(self, manager: SQLiteManager, db_path: Path, default_limit: int = DEFAULT_RECENT_LIMIT) -> None:
        self.manager = manager
        self.db_path = db_path
        self.default_limit = default_limit
        self.logger = get_logger("store")
        self._conn = self.manager.connect(db_path)

    def insert_if_absent(self, candidate: CandidateRecord) -> InsertResult:
        conn = self._conn
        try:
            conn.execute("BEGIN")
        except sqlite3.Error as exc:
            self.logger.error("transaction_begin_failed", name=candidate.name, error=str(exc))
            return InsertResult(InsertStatus.FAILED, exc)
        try:
            conn.execute(INSERT_SQL, (candidate.name, candidate.title, candidate.description))
            conn.commit()
        except sqlite3.IntegrityError as exc:
            self._rollback()
            if _is_unique_violation(exc):
                return InsertResult(InsertStatus.ALREADY_EXISTS)
            self.logger.error("patch_insert_failed", name=candidate.name, error=str(exc))
            return InsertResult(InsertStatus.FAILED, exc)
        except sqlite3.Error as exc:
            self._rollback()
            self.logger.error("patch_insert_failed", name=candidate.name, error=str(exc))
            return InsertResult(InsertStatus.FAILED, exc)
        return InsertResult(InsertStatus.INSERTED)

    def list_recent(self, limit: Any = None) -> list[PatchRecord]:
        """Return at most ``limit`` records, newest first (ties by insertion order, latest first)."""

        count = coerce_limit(limit, self.default_limit)
        try:
            rows = self._conn.execute(RECENT_SQL, (count,)).fetchall()
        except sqlite3.Error as exc:
            raise QueryError(f"Failed to list patches: {exc}") from exc
        return [
            PatchRecord(
                name=row["name"],
                title=row["title"] or "",
                description=row["description"] or "",
                created_at=_parse_timestamp(row["created_at"]),
            )
            for row in rows
        ]

    def count(self) -> int:
        try:
            return int(self._conn.execute("SELECT count(*) FROM patches").fetchone()[0])
        except sqlite3.Error as exc:
            raise QueryError(f"Failed to count patches: {exc}") from exc

    def _rollback(self) -> None:
        try:
            self._conn.rollback()
        except sqlite3.Error as exc:  # pragma: no cover
            self.logger.warning("transaction_rollback_failed", error=str(exc))


__all__ = [
    "InsertResult",
    "InsertStatus",
    "MAX_RECENT_LIMIT",
    "PatchRecord",
    "PatchStore",
    "coerce_limit",
]
