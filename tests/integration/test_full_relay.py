"""End-to-end integration tests — Relay over a simulated Telegram Bot API.

A ``httpx.MockTransport`` plays the Bot API: it knows a set of open chats,
answers "chat not found" for everything else, and "bot was blocked by the
user" for chats that blocked the bot.  Updates, service requests and
notifications all flow through one ``Relay`` with a SQLite directory.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from relaydesk.channels.telegram import TelegramChannel
from relaydesk.core.relay import Relay
from relaydesk.models.delivery import DeliveryStatus


class FakeBotApi:
    """In-process stand-in for api.telegram.org ``sendMessage``."""

    def __init__(self) -> None:
        self.open_chats: set[str] = set()
        self.blocked_chats: set[str] = set()
        self.rate_limited = False
        self.sent: list[tuple[str, str]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        chat_id = str(body["chat_id"])
        if self.rate_limited:
            return self._error(429, "Too Many Requests: retry after 1")
        if chat_id in self.blocked_chats:
            return self._error(403, "Forbidden: bot was blocked by the user")
        if chat_id not in self.open_chats:
            return self._error(400, "Bad Request: chat not found")
        self.sent.append((chat_id, body["text"]))
        return httpx.Response(200, json={"ok": True, "result": {"message_id": len(self.sent)}})

    @staticmethod
    def _error(code: int, description: str) -> httpx.Response:
        return httpx.Response(
            code, json={"ok": False, "error_code": code, "description": description}
        )


def _start_update(user_id: int, chat_id: int) -> dict[str, Any]:
    return {
        "update_id": user_id,
        "message": {
            "message_id": 1,
            "from": {"id": user_id, "first_name": "Ann"},
            "chat": {"id": chat_id, "type": "private"},
            "text": "/start",
        },
    }


@pytest.fixture
def bot_api() -> FakeBotApi:
    api = FakeBotApi()
    api.open_chats.update({"900", "4242"})
    return api


@pytest.fixture
def relay(make_settings, bot_api: FakeBotApi):
    client = httpx.Client(transport=httpx.MockTransport(bot_api))
    channel = TelegramChannel("123:ABC", client=client)
    settings = make_settings(channel="telegram", bot_token="123:ABC")
    with Relay(settings, channel=channel) as instance:
        yield instance
    client.close()


class TestRelayEndToEnd:
    def test_user_reached_after_start(self, relay: Relay, bot_api: FakeBotApi):
        relay.ingest_update(_start_update(42, 4242))

        result = relay.notify(42, "hello")

        assert result.delivered is True
        assert bot_api.sent == [("4242", "hello")]

    def test_user_never_started(self, relay: Relay, bot_api: FakeBotApi):
        result = relay.notify(42, "hello")
        assert result.status is DeliveryStatus.NO_ADDRESS
        assert bot_api.sent == []

    def test_stale_chat_is_evicted(self, relay: Relay, bot_api: FakeBotApi):
        relay.record_address(5, 5555)

        first = relay.notify(5, "x")
        second = relay.notify(5, "x")

        assert first.status is DeliveryStatus.INVALID_ADDRESS
        assert second.status is DeliveryStatus.NO_ADDRESS
        assert relay.lookup_address(5) is None

    def test_blocked_bot_is_evicted(self, relay: Relay, bot_api: FakeBotApi):
        relay.ingest_update(_start_update(42, 4242))
        bot_api.blocked_chats.add("4242")

        assert relay.notify(42, "x").status is DeliveryStatus.INVALID_ADDRESS
        assert relay.lookup_address(42) is None

    def test_rate_limit_keeps_address(self, relay: Relay, bot_api: FakeBotApi):
        relay.ingest_update(_start_update(42, 4242))
        bot_api.rate_limited = True

        assert relay.notify(42, "x").status is DeliveryStatus.CHANNEL_ERROR
        assert relay.lookup_address(42) == "4242"

        bot_api.rate_limited = False
        assert relay.notify(42, "x").delivered is True

    def test_one_on_one_request(self, relay: Relay, bot_api: FakeBotApi):
        relay.ingest_update(_start_update(42, 4242))

        response = relay.handle_request(
            {"serviceType": "one_on_one", "userData": {"id": 42, "first_name": "Ann"}}
        )

        assert response.status == "success"
        assert response.delivered is True
        assert [chat for chat, _ in bot_api.sent] == ["4242", "900"]
        assert relay.request_log.for_user(42)[0].status == "success"

    def test_directory_survives_restart(
        self, make_settings, bot_api: FakeBotApi
    ):
        settings = make_settings(channel="telegram", bot_token="123:ABC")
        transport = httpx.MockTransport(bot_api)

        with Relay(settings, channel=TelegramChannel("t", client=httpx.Client(transport=transport))) as first:
            first.ingest_update(_start_update(42, 4242))

        with Relay(settings, channel=TelegramChannel("t", client=httpx.Client(transport=transport))) as second:
            assert second.lookup_address(42) == "4242"
            assert second.notify(42, "welcome back").delivered is True
