"""Append-only request log backed by SQLite.

Every service request handled by the desk leaves exactly one row: who
asked, for which service, and whether it succeeded.  There is no update
or delete.
"""

from __future__ import annotations

import sqlite3
import threading
from datetime import datetime
from pathlib import Path

from relaydesk.models.requests import RequestLogEntry

_CREATE_LOG = """
CREATE TABLE IF NOT EXISTS request_log (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    entry_id       TEXT NOT NULL UNIQUE,
    timestamp_utc  TEXT NOT NULL,
    user_id        TEXT NOT NULL,
    first_name     TEXT NOT NULL DEFAULT '',
    service        TEXT NOT NULL,
    status         TEXT NOT NULL
);
"""

_CREATE_IDX_USER = """
CREATE INDEX IF NOT EXISTS idx_request_user ON request_log(user_id, id);
"""

_COLUMNS = "entry_id, timestamp_utc, user_id, first_name, service, status"


class RequestLog:
    """Append-only log of service requests.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Created if it does not exist.
    """

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_schema(self) -> None:
        with self._lock, self._connect() as conn:
            conn.execute(_CREATE_LOG)
            conn.execute(_CREATE_IDX_USER)
            conn.commit()

    def append(
        self,
        user_id: str | int,
        service: str,
        status: str,
        *,
        first_name: str = "",
    ) -> RequestLogEntry:
        """Record one handled request.  This is the only write method."""
        entry = RequestLogEntry(
            user_id=str(user_id) if user_id not in (None, "") else "unknown",
            first_name=first_name,
            service=service or "unknown",
            status=status,
        )
        with self._lock, self._connect() as conn:
            conn.execute(
                f"INSERT INTO request_log ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
                (
                    entry.entry_id,
                    entry.timestamp_utc.isoformat(),
                    entry.user_id,
                    entry.first_name,
                    entry.service,
                    entry.status,
                ),
            )
            conn.commit()
        return entry

    def recent(self, limit: int = 50) -> list[RequestLogEntry]:
        """Return the newest *limit* entries, newest first."""
        with self._lock, self._connect() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM request_log ORDER BY id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def for_user(self, user_id: str | int) -> list[RequestLogEntry]:
        """Return all entries for one user, oldest first."""
        with self._lock, self._connect() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM request_log WHERE user_id = ? ORDER BY id ASC",
                (str(user_id),),
            ).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def count(self) -> int:
        with self._lock, self._connect() as conn:
            row = conn.execute("SELECT COUNT(*) FROM request_log").fetchone()
        return row[0] if row else 0

    @staticmethod
    def _row_to_entry(row: tuple) -> RequestLogEntry:
        entry_id, timestamp_utc, user_id, first_name, service, status = row
        return RequestLogEntry(
            entry_id=entry_id,
            timestamp_utc=datetime.fromisoformat(timestamp_utc),
            user_id=user_id,
            first_name=first_name,
            service=service,
            status=status,
        )
