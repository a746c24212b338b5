"""Address Directory — best-known delivery address per user.

Maps an external user identifier (a Telegram user id) to the address a
message can be pushed to right now (a Telegram chat id).  Entries are
learned from inbound traffic and evicted when a delivery proves them stale.

Design:
- One address per user, last write wins.
- Identifiers are normalized to ``str``: ``42`` and ``"42"`` are one key.
- Every storage operation runs under a single lock, so each key is updated
  atomically.  Callers never hold the lock across a network call.

Two backends satisfy the ``AddressDirectory`` protocol:

1. ``SqliteAddressDirectory`` — durable, survives restart.  Production.
2. ``InMemoryAddressDirectory`` — volatile dict.  Tests and dry runs.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol, runtime_checkable

from relaydesk.models.delivery import AddressEntry

logger = logging.getLogger(__name__)


class InvalidArgumentError(ValueError):
    """Raised when a required identifier or message is empty or missing."""


def require_identifier(value: object, name: str) -> str:
    """Normalize *value* to a non-empty string or raise ``InvalidArgumentError``."""
    if value is None or isinstance(value, bool):
        raise InvalidArgumentError(f"{name} is required")
    text = str(value).strip()
    if not text:
        raise InvalidArgumentError(f"{name} must not be empty")
    return text


@runtime_checkable
class AddressDirectory(Protocol):
    """Protocol every directory backend implements."""

    def record_address(self, user_id: str | int, address: str | int) -> None:
        """Store *address* for *user_id*, replacing any previous one."""
        ...

    def lookup_address(self, user_id: str | int) -> str | None:
        """Return the stored address, or ``None`` if there is none."""
        ...

    def evict_address(
        self, user_id: str | int, expected_address: str | None = None
    ) -> None:
        """Remove the stored address.  No error if absent.

        With *expected_address*, remove it only while it is still the stored
        address, so a newer record is never lost.
        """
        ...


# ---------------------------------------------------------------------------
# In-memory backend
# ---------------------------------------------------------------------------


class InMemoryAddressDirectory:
    """Volatile directory backed by a dict."""

    def __init__(self) -> None:
        self._entries: dict[str, AddressEntry] = {}
        self._lock = threading.Lock()

    def record_address(self, user_id: str | int, address: str | int) -> None:
        key = require_identifier(user_id, "user_id")
        value = require_identifier(address, "address")
        entry = AddressEntry(user_id=key, address=value)
        with self._lock:
            self._entries[key] = entry
        logger.debug("Recorded address for user %s", key)

    def lookup_address(self, user_id: str | int) -> str | None:
        key = require_identifier(user_id, "user_id")
        with self._lock:
            entry = self._entries.get(key)
        return entry.address if entry else None

    def evict_address(
        self, user_id: str | int, expected_address: str | None = None
    ) -> None:
        key = require_identifier(user_id, "user_id")
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return
            if expected_address is not None and entry.address != expected_address:
                return
            del self._entries[key]
        logger.info("Evicted address for user %s", key)

    def get_entry(self, user_id: str | int) -> AddressEntry | None:
        key = require_identifier(user_id, "user_id")
        with self._lock:
            return self._entries.get(key)

    def list_entries(self) -> list[AddressEntry]:
        with self._lock:
            entries = list(self._entries.values())
        return sorted(entries, key=lambda e: e.user_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# ---------------------------------------------------------------------------
# SQLite backend
# ---------------------------------------------------------------------------

_CREATE_DIRECTORY = """
CREATE TABLE IF NOT EXISTS address_directory (
    user_id     TEXT PRIMARY KEY,
    address     TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
"""

_UPSERT = """
INSERT INTO address_directory (user_id, address, updated_at)
VALUES (?, ?, ?)
ON CONFLICT(user_id) DO UPDATE SET
    address = excluded.address,
    updated_at = excluded.updated_at
"""


class SqliteAddressDirectory:
    """Durable directory backed by a SQLite table, one row per user.

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

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_schema(self) -> None:
        with self._lock, self._connect() as conn:
            conn.execute(_CREATE_DIRECTORY)
            conn.commit()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def record_address(self, user_id: str | int, address: str | int) -> None:
        key = require_identifier(user_id, "user_id")
        value = require_identifier(address, "address")
        now = datetime.now(timezone.utc).isoformat()
        with self._lock, self._connect() as conn:
            conn.execute(_UPSERT, (key, value, now))
            conn.commit()
        logger.debug("Recorded address for user %s", key)

    def evict_address(
        self, user_id: str | int, expected_address: str | None = None
    ) -> None:
        key = require_identifier(user_id, "user_id")
        sql = "DELETE FROM address_directory WHERE user_id = ?"
        params: tuple[str, ...] = (key,)
        if expected_address is not None:
            sql += " AND address = ?"
            params = (key, expected_address)
        with self._lock, self._connect() as conn:
            cursor = conn.execute(sql, params)
            conn.commit()
        if cursor.rowcount:
            logger.info("Evicted address for user %s", key)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def lookup_address(self, user_id: str | int) -> str | None:
        entry = self.get_entry(user_id)
        return entry.address if entry else None

    def get_entry(self, user_id: str | int) -> AddressEntry | None:
        key = require_identifier(user_id, "user_id")
        with self._lock, self._connect() as conn:
            row = conn.execute(
                "SELECT user_id, address, updated_at FROM address_directory "
                "WHERE user_id = ?",
                (key,),
            ).fetchone()
        return self._row_to_entry(row) if row else None

    def list_entries(self) -> list[AddressEntry]:
        with self._lock, self._connect() as conn:
            rows = conn.execute(
                "SELECT user_id, address, updated_at FROM address_directory "
                "ORDER BY user_id ASC"
            ).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def __len__(self) -> int:
        with self._lock, self._connect() as conn:
            row = conn.execute("SELECT COUNT(*) FROM address_directory").fetchone()
        return row[0] if row else 0

    @staticmethod
    def _row_to_entry(row: tuple) -> AddressEntry:
        user_id, address, updated_at = row
        return AddressEntry(user_id=user_id, address=address, updated_at=updated_at)
