"""Relay — wires the directory, channel, dispatcher and service desk together.

The Relay is what the rest of the application talks to.  It exposes the
address directory operations, ``notify``, inbound update ingestion and
service request handling, all built from one ``RelaySettings``.
"""

from __future__ import annotations

import logging
from typing import Any

from relaydesk.channels import NotificationChannel
from relaydesk.channels.local_outbox import LocalOutboxChannel
from relaydesk.channels.telegram import TelegramChannel
from relaydesk.config import RelaySettings
from relaydesk.core.address_directory import AddressDirectory, SqliteAddressDirectory
from relaydesk.core.dispatcher import NotificationDispatcher
from relaydesk.core.inbound import InboundEvent, ingest_update
from relaydesk.core.production_guard import enforce_production_constraints
from relaydesk.core.request_log import RequestLog
from relaydesk.core.subscriptions import SubscriptionStore
from relaydesk.models.delivery import DeliveryResult
from relaydesk.models.requests import ServiceRequest, ServiceResponse
from relaydesk.services.desk import ServiceDesk

logger = logging.getLogger(__name__)


def build_channel(settings: RelaySettings) -> NotificationChannel:
    """Create the notification channel selected by ``settings.channel``.

    Raises
    ------
    ValueError
        If the Telegram channel is selected without a bot token.
    """
    if settings.channel == "local_outbox":
        return LocalOutboxChannel(settings.outbox_path)
    if not settings.bot_token:
        raise ValueError(
            "The telegram channel needs RELAYDESK_BOT_TOKEN; "
            "set it or use RELAYDESK_CHANNEL=local_outbox"
        )
    return TelegramChannel(
        settings.bot_token,
        api_base=settings.telegram_api_base,
        timeout_seconds=settings.request_timeout_seconds,
        parse_mode=settings.parse_mode,
    )


class Relay:
    """Notification relay for the Mini-App backend.

    Parameters
    ----------
    settings:
        Runtime settings.  Uses environment-derived defaults if not provided.
    directory:
        Address directory override (e.g. an in-memory one for tests).
        Defaults to a SQLite directory at ``settings.directory_path``.
    channel:
        Channel override.  Defaults to the one ``settings.channel`` names.
    """

    def __init__(
        self,
        settings: RelaySettings | None = None,
        *,
        directory: AddressDirectory | None = None,
        channel: NotificationChannel | None = None,
    ) -> None:
        self.settings = settings or RelaySettings()

        # Fails hard if production constraints are violated
        enforce_production_constraints(self.settings)

        if directory is None:
            directory = SqliteAddressDirectory(self.settings.directory_path)
        self.directory: AddressDirectory = directory
        self.request_log = RequestLog(self.settings.request_log_path)
        self.subscriptions = SubscriptionStore(self.settings.subscriptions_path)

        # Built on first use, so directory-only callers never need a bot token
        self._channel: NotificationChannel | None = channel
        self._dispatcher: NotificationDispatcher | None = None
        self._desk: ServiceDesk | None = None
        logger.info(
            "Relay ready (environment=%s, channel=%s)",
            self.settings.environment,
            self.settings.channel if channel is None else channel.channel_name,
        )

    @property
    def channel(self) -> NotificationChannel:
        if self._channel is None:
            self._channel = build_channel(self.settings)
        return self._channel

    @property
    def dispatcher(self) -> NotificationDispatcher:
        if self._dispatcher is None:
            self._dispatcher = NotificationDispatcher(self.directory, self.channel)
        return self._dispatcher

    @property
    def desk(self) -> ServiceDesk:
        if self._desk is None:
            self._desk = ServiceDesk(
                self.dispatcher, self.request_log, self.subscriptions, self.settings
            )
        return self._desk

    # ------------------------------------------------------------------
    # Address directory
    # ------------------------------------------------------------------

    def record_address(self, user_id: str | int, address: str | int) -> None:
        self.directory.record_address(user_id, address)

    def lookup_address(self, user_id: str | int) -> str | None:
        return self.directory.lookup_address(user_id)

    def evict_address(self, user_id: str | int) -> None:
        self.directory.evict_address(user_id)

    # ------------------------------------------------------------------
    # Delivery and requests
    # ------------------------------------------------------------------

    def notify(self, user_id: str | int, message: str) -> DeliveryResult:
        return self.dispatcher.notify(user_id, message)

    def ingest_update(self, update: dict[str, Any]) -> InboundEvent | None:
        return ingest_update(self.directory, update)

    def handle_request(self, payload: dict[str, Any] | ServiceRequest) -> ServiceResponse:
        return self.desk.handle(payload)

    def broadcast_newsletter(self, message: str) -> dict[str, DeliveryResult]:
        return self.desk.broadcast_newsletter(message)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Release the channel's resources."""
        if self._channel is None:
            return
        close = getattr(self._channel, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> Relay:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
