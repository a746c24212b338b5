"""Telegram channel — delivers messages through the Bot API ``sendMessage``.

The address is a Telegram ``chat_id``.  The Bot API answers every call with
``{"ok": bool, "description": str, "error_code": int}``; the description is
the only reliable signal for *why* a send failed, so failures are
classified by matching it:

- "chat not found", "bot was blocked by the user" and similar mean the
  chat is gone for good: ``SendOutcome.INVALID_ADDRESS``.
- Rate limits (429), server errors, other bad requests and transport
  errors may clear up on their own: ``SendOutcome.OTHER_ERROR``.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from relaydesk.channels._formatting import truncate_message
from relaydesk.models.delivery import SendOutcome

logger = logging.getLogger(__name__)

# Lower-cased fragments of Bot API error descriptions that prove the chat
# can no longer be reached by this bot.
UNREACHABLE_CHAT_MARKERS: tuple[str, ...] = (
    "chat not found",
    "user not found",
    "peer_id_invalid",
    "bot was blocked by the user",
    "user is deactivated",
    "bot can't initiate conversation",
    "bot was kicked",
)


def classify_api_error(error_code: int | None, description: str) -> SendOutcome:
    """Map a failed Bot API response to a ``SendOutcome``."""
    text = (description or "").lower()
    if error_code in (400, 403) and any(m in text for m in UNREACHABLE_CHAT_MARKERS):
        return SendOutcome.INVALID_ADDRESS
    return SendOutcome.OTHER_ERROR


class TelegramChannel:
    """Sends messages to Telegram chats over HTTP.

    Parameters
    ----------
    bot_token:
        The BotFather token.
    api_base:
        Bot API root URL.  Override for a local Bot API server.
    timeout_seconds:
        Per-request timeout passed to httpx.
    parse_mode:
        Optional ``parse_mode`` ("HTML", "MarkdownV2").  Empty sends plain text.
    client:
        Pre-built ``httpx.Client``.  The channel creates (and owns) one if
        not provided.
    """

    def __init__(
        self,
        bot_token: str,
        *,
        api_base: str = "https://api.telegram.org",
        timeout_seconds: float = 10.0,
        parse_mode: str = "",
        client: httpx.Client | None = None,
    ) -> None:
        if not bot_token:
            raise ValueError("TelegramChannel requires a bot token")
        self._bot_token = bot_token
        self._api_base = api_base.rstrip("/")
        self._parse_mode = parse_mode
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout_seconds)

    @property
    def channel_name(self) -> str:
        return "telegram"

    def build_api_url(self, method: str = "sendMessage") -> str:
        """Return the Bot API URL for *method*."""
        return f"{self._api_base}/bot{self._bot_token}/{method}"

    def build_payload(self, address: str, message: str) -> dict[str, Any]:
        """Return the ``sendMessage`` JSON body."""
        payload: dict[str, Any] = {
            "chat_id": address,
            "text": truncate_message(message),
            "disable_web_page_preview": True,
        }
        if self._parse_mode:
            payload["parse_mode"] = self._parse_mode
        return payload

    def send(self, address: str, message: str) -> SendOutcome:
        """POST ``sendMessage`` and classify the answer."""
        try:
            response = self._client.post(
                self.build_api_url(), json=self.build_payload(address, message)
            )
        except httpx.HTTPError as exc:
            logger.warning("Telegram sendMessage to %s failed: %s", address, exc)
            return SendOutcome.OTHER_ERROR

        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            logger.warning(
                "Telegram sendMessage to %s returned non-JSON (HTTP %d)",
                address,
                response.status_code,
            )
            return SendOutcome.OTHER_ERROR

        if response.is_success and body.get("ok"):
            logger.debug("Telegram accepted message for chat %s", address)
            return SendOutcome.ACCEPTED

        error_code = body.get("error_code", response.status_code)
        description = body.get("description", "")
        outcome = classify_api_error(error_code, description)
        logger.warning(
            "Telegram rejected message for chat %s: %s %s (%s)",
            address,
            error_code,
            description,
            outcome.value,
        )
        return outcome

    def close(self) -> None:
        """Close the HTTP client if this channel created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> TelegramChannel:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"TelegramChannel(api_base={self._api_base!r})"
