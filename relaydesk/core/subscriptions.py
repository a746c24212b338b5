"""Newsletter subscriptions backed by SQLite.

Subscribers are keyed by lower-cased email; subscribing the same address
twice raises ``AlreadySubscribedError``.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import datetime
from pathlib import Path

from relaydesk.models.requests import Subscriber

logger = logging.getLogger(__name__)

_CREATE_SUBSCRIBERS = """
CREATE TABLE IF NOT EXISTS subscribers (
    email          TEXT PRIMARY KEY,
    user_id        TEXT NOT NULL,
    first_name     TEXT NOT NULL DEFAULT '',
    subscribed_at  TEXT NOT NULL
);
"""


class AlreadySubscribedError(RuntimeError):
    """Raised when an email address is already on the newsletter list."""


def _normalize_email(email: str) -> str:
    normalized = (email or "").strip().lower()
    if not normalized or "@" not in normalized:
        raise ValueError(f"Invalid email address: {email!r}")
    return normalized


class SubscriptionStore:
    """Durable newsletter subscriber list.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Created if it does not exist.
    """

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        with self._lock, self._connect() as conn:
            conn.execute(_CREATE_SUBSCRIBERS)
            conn.commit()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def subscribe(
        self, user_id: str | int, email: str, *, first_name: str = ""
    ) -> Subscriber:
        """Add a subscriber.

        Raises
        ------
        ValueError
            If *email* is empty or malformed.
        AlreadySubscribedError
            If *email* is already subscribed.
        """
        subscriber = Subscriber(
            user_id=str(user_id),
            email=_normalize_email(email),
            first_name=first_name,
        )
        try:
            with self._lock, self._connect() as conn:
                conn.execute(
                    "INSERT INTO subscribers (email, user_id, first_name, subscribed_at) "
                    "VALUES (?, ?, ?, ?)",
                    (
                        subscriber.email,
                        subscriber.user_id,
                        subscriber.first_name,
                        subscriber.subscribed_at.isoformat(),
                    ),
                )
                conn.commit()
        except sqlite3.IntegrityError as exc:
            raise AlreadySubscribedError("You're already subscribed!") from exc

        logger.info("Subscribed %s (user %s)", subscriber.email, subscriber.user_id)
        return subscriber

    def is_subscribed(self, email: str) -> bool:
        with self._lock, self._connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM subscribers WHERE email = ?",
                ((email or "").strip().lower(),),
            ).fetchone()
        return row is not None

    def unsubscribe(self, email: str) -> bool:
        """Remove a subscriber.  Returns ``True`` if one was removed."""
        with self._lock, self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM subscribers WHERE email = ?",
                ((email or "").strip().lower(),),
            )
            conn.commit()
        return cursor.rowcount > 0

    def list_subscribers(self) -> list[Subscriber]:
        with self._lock, self._connect() as conn:
            rows = conn.execute(
                "SELECT email, user_id, first_name, subscribed_at FROM subscribers "
                "ORDER BY subscribed_at ASC, email ASC"
            ).fetchall()
        return [
            Subscriber(
                email=email,
                user_id=user_id,
                first_name=first_name,
                subscribed_at=datetime.fromisoformat(subscribed_at),
            )
            for email, user_id, first_name, subscribed_at in rows
        ]
