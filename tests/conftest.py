"""Shared test fixtures for relaydesk."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

import pytest

from relaydesk.config import RelaySettings
from relaydesk.core.address_directory import (
    InMemoryAddressDirectory,
    SqliteAddressDirectory,
)
from relaydesk.core.request_log import RequestLog
from relaydesk.core.subscriptions import SubscriptionStore
from relaydesk.models.delivery import SendOutcome


class RecordingChannel:
    """A channel stub that records every send and replays scripted outcomes.

    Outcomes are consumed in order; once exhausted, ``default`` is returned.
    An ``Exception`` instance in the script is raised instead of returned.
    """

    def __init__(
        self,
        outcomes: Iterable[SendOutcome | Exception] = (),
        default: SendOutcome = SendOutcome.ACCEPTED,
    ) -> None:
        self._script = list(outcomes)
        self._default = default
        self.calls: list[tuple[str, str]] = []

    @property
    def channel_name(self) -> str:
        return "recording"

    def send(self, address: str, message: str) -> SendOutcome:
        self.calls.append((address, message))
        outcome = self._script.pop(0) if self._script else self._default
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self) -> None:
        pass


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test databases."""
    return tmp_path


@pytest.fixture
def memory_directory() -> InMemoryAddressDirectory:
    """Provide an empty in-memory address directory."""
    return InMemoryAddressDirectory()


@pytest.fixture
def sqlite_directory(tmp_dir: Path) -> SqliteAddressDirectory:
    """Provide a fresh SQLite address directory in a temp directory."""
    return SqliteAddressDirectory(tmp_dir / "directory.db")


@pytest.fixture(params=["memory", "sqlite"])
def directory(request: pytest.FixtureRequest, tmp_dir: Path):
    """Parametrized over both directory backends."""
    if request.param == "memory":
        return InMemoryAddressDirectory()
    return SqliteAddressDirectory(tmp_dir / "directory.db")


@pytest.fixture
def make_channel() -> Callable[..., RecordingChannel]:
    """Factory fixture: build a RecordingChannel with scripted outcomes."""

    def _factory(*outcomes: SendOutcome | Exception, **kwargs: Any) -> RecordingChannel:
        return RecordingChannel(outcomes, **kwargs)

    return _factory


@pytest.fixture
def request_log(tmp_dir: Path) -> RequestLog:
    return RequestLog(tmp_dir / "requests.db")


@pytest.fixture
def subscriptions(tmp_dir: Path) -> SubscriptionStore:
    return SubscriptionStore(tmp_dir / "subscriptions.db")


@pytest.fixture
def make_settings(tmp_dir: Path) -> Callable[..., RelaySettings]:
    """Factory fixture: RelaySettings rooted in the temp directory, no .env file."""

    def _factory(**overrides: Any) -> RelaySettings:
        defaults: dict[str, Any] = {
            "directory_path": tmp_dir / "directory.db",
            "request_log_path": tmp_dir / "requests.db",
            "subscriptions_path": tmp_dir / "subscriptions.db",
            "outbox_path": tmp_dir / "outbox",
            "channel": "local_outbox",
            "admin_chat_id": "900",
            "book_download_url": "https://example.org/books.zip",
        }
        defaults.update(overrides)
        return RelaySettings(_env_file=None, **defaults)

    return _factory
