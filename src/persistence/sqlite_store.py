"""SQLite-backed index of cache entries."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterator

from persistence.errors import ReserveCacheError
from persistence.models import CacheEntry


_SCHEMA = """
PRAGMA journal_mode=WAL;

CREATE TABLE IF NOT EXISTS cache_entries (
    entry_id INTEGER PRIMARY KEY AUTOINCREMENT,
    cache_key TEXT NOT NULL UNIQUE,
    status TEXT NOT NULL,
    archive_path TEXT,
    archive_size INTEGER,
    content_hash TEXT,
    created_at TEXT NOT NULL,
    committed_at TEXT,
    last_accessed TEXT
);
CREATE INDEX IF NOT EXISTS idx_cache_entries_status ON cache_entries(status);
"""


DEFAULT_STALE_RESERVATION = timedelta(hours=1)


class SqliteStore:
    def __init__(
        self, path: str | Path, *, stale_after: timedelta = DEFAULT_STALE_RESERVATION
    ) -> None:
        self._path = Path(path)
        self._stale_after = stale_after
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize()

    @property
    def path(self) -> Path:
        return self._path

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self._path)
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _initialize(self) -> None:
        with self._connect() as conn:
            conn.executescript(_SCHEMA)

    def reserve(self, cache_key: str) -> int:
        """Reserve ``cache_key`` for a save.

        A reservation older than ``stale_after`` belongs to a save that never
        finished and is taken over.
        """
        cutoff = (datetime.now(timezone.utc) - self._stale_after).isoformat()
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    DELETE FROM cache_entries
                     WHERE cache_key = ? AND status = 'reserved' AND created_at < ?
                    """,
                    (cache_key, cutoff),
                )
                cur = conn.execute(
                    "INSERT INTO cache_entries (cache_key, status, created_at) VALUES (?, ?, ?)",
                    (cache_key, "reserved", _now_iso()),
                )
                return int(cur.lastrowid)
        except sqlite3.IntegrityError as exc:
            raise ReserveCacheError(
                f"Unable to reserve cache with key {cache_key}, another job may be creating this cache."
            ) from exc

    def commit(
        self, entry_id: int, *, archive_path: str, archive_size: int, content_hash: str
    ) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                UPDATE cache_entries
                   SET status = 'committed', archive_path = ?, archive_size = ?,
                       content_hash = ?, committed_at = ?
                 WHERE entry_id = ?
                """,
                (archive_path, archive_size, content_hash, _now_iso(), entry_id),
            )

    def release(self, entry_id: int) -> None:
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM cache_entries WHERE entry_id = ? AND status = 'reserved'",
                (entry_id,),
            )

    def get_committed(self, cache_key: str) -> CacheEntry | None:
        row = self._fetch_one(
            "SELECT * FROM cache_entries WHERE cache_key = ? AND status = 'committed'",
            (cache_key,),
        )
        return _row_to_entry(row) if row else None

    def find_by_prefix(self, prefix: str) -> CacheEntry | None:
        """Return the newest committed entry whose key starts with ``prefix``."""
        row = self._fetch_one(
            """
            SELECT * FROM cache_entries
             WHERE status = 'committed' AND substr(cache_key, 1, length(?)) = ?
             ORDER BY committed_at DESC, entry_id DESC
             LIMIT 1
            """,
            (prefix, prefix),
        )
        return _row_to_entry(row) if row else None

    def touch(self, entry_id: int) -> None:
        with self._connect() as conn:
            conn.execute(
                "UPDATE cache_entries SET last_accessed = ? WHERE entry_id = ?",
                (_now_iso(), entry_id),
            )

    def list_entries(self) -> list[CacheEntry]:
        rows = self._fetch_all("SELECT * FROM cache_entries ORDER BY entry_id")
        return [_row_to_entry(row) for row in rows]

    def _fetch_one(self, query: str, params: tuple[object, ...] = ()) -> sqlite3.Row | None:
        with self._connect() as conn:
            cur = conn.execute(query, params)
            return cur.fetchone()

    def _fetch_all(self, query: str, params: tuple[object, ...] = ()) -> list[sqlite3.Row]:
        with self._connect() as conn:
            cur = conn.execute(query, params)
            return cur.fetchall()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _from_iso(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _row_to_entry(row: sqlite3.Row) -> CacheEntry:
    return CacheEntry(
        entry_id=row["entry_id"],
        cache_key=row["cache_key"],
        status=row["status"],
        archive_path=row["archive_path"],
        archive_size=row["archive_size"],
        content_hash=row["content_hash"],
        created_at=datetime.fromisoformat(row["created_at"]),
        committed_at=_from_iso(row["committed_at"]),
        last_accessed=_from_iso(row["last_accessed"]),
    )


__all__ = ["DEFAULT_STALE_RESERVATION", "SqliteStore"]
