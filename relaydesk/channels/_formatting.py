"""Shared formatting helpers for relaydesk channels and messages."""

from __future__ import annotations

import json
from typing import Any

# Telegram rejects sendMessage texts longer than this.
TELEGRAM_MAX_MESSAGE_LENGTH = 4096


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes — deterministic, sorted, compact."""
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def truncate_message(text: str, limit: int = TELEGRAM_MAX_MESSAGE_LENGTH) -> str:
    """Cut *text* to at most *limit* characters, marking the cut with an ellipsis.

    >>> truncate_message("abcdef", limit=4)
    'abc…'
    """
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


def format_user_label(first_name: str, username: str = "") -> str:
    """Return ``"Ann (@ann)"``, or ``"Ann (no username)"`` without a username.

    >>> format_user_label("Ann", "ann")
    'Ann (@ann)'
    """
    name = first_name or "unknown"
    handle = f"@{username.lstrip('@')}" if username else "no username"
    return f"{name} ({handle})"
