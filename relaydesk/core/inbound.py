"""Inbound Telegram updates — learn and invalidate delivery addresses.

A user becomes reachable once they write to the bot in a private chat.
Every such update records ``from.id -> chat.id`` in the directory.  A
``my_chat_member`` update whose new status is ``kicked`` (the user blocked
the bot) or ``left`` evicts the entry.  Group and channel chats are not
1-on-1 delivery addresses and are ignored.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from relaydesk.core.address_directory import AddressDirectory

logger = logging.getLogger(__name__)

_MESSAGE_KEYS = ("message", "edited_message")
_GONE_STATUSES = frozenset({"kicked", "left"})


class InboundKind(str, Enum):
    """What an inbound update means for the directory."""

    RECORD = "record"
    EVICT = "evict"


class InboundEvent(BaseModel):
    """An address change derived from a Telegram update."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    address: str
    kind: InboundKind = InboundKind.RECORD


def _private_chat_event(chat: Any, user: Any, kind: InboundKind) -> InboundEvent | None:
    if not isinstance(chat, dict) or not isinstance(user, dict):
        return None
    if chat.get("type", "private") != "private":
        return None
    if user.get("id") is None or chat.get("id") is None:
        return None
    return InboundEvent(user_id=str(user["id"]), address=str(chat["id"]), kind=kind)


def extract_inbound(update: dict[str, Any]) -> InboundEvent | None:
    """Derive an ``InboundEvent`` from a raw Telegram update, if it carries one."""
    for key in _MESSAGE_KEYS:
        message = update.get(key)
        if isinstance(message, dict):
            return _private_chat_event(
                message.get("chat"), message.get("from"), InboundKind.RECORD
            )

    callback = update.get("callback_query")
    if isinstance(callback, dict):
        message = callback.get("message")
        if not isinstance(message, dict):
            return None
        return _private_chat_event(
            message.get("chat"), callback.get("from"), InboundKind.RECORD
        )

    member = update.get("my_chat_member")
    if isinstance(member, dict):
        new_member = member.get("new_chat_member")
        status = new_member.get("status", "") if isinstance(new_member, dict) else ""
        kind = InboundKind.EVICT if status in _GONE_STATUSES else InboundKind.RECORD
        return _private_chat_event(member.get("chat"), member.get("from"), kind)

    return None


def ingest_update(
    directory: AddressDirectory, update: dict[str, Any]
) -> InboundEvent | None:
    """Apply a Telegram update to the directory.

    Returns the applied event, or ``None`` if the update was ignored.
    """
    event = extract_inbound(update)
    if event is None:
        logger.debug("Ignored update %s", update.get("update_id", "?"))
        return None

    if event.kind is InboundKind.EVICT:
        directory.evict_address(event.user_id)
        logger.info("User %s blocked or left the bot chat", event.user_id)
    else:
        directory.record_address(event.user_id, event.address)
    return event
