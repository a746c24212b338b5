"""NotificationDispatcher — best-effort, address-gated delivery.

Given a user id and a message, the dispatcher looks up the user's delivery
address, attempts one send through the channel, and reports the outcome as
a ``DeliveryResult``.  Delivery failures are never raised:

    lookup ──absent──────────────────────────────> delivered=False (no_address)
       │
       └─present─> send ──accepted────────────────> delivered=True
                     ├──invalid_address─> evict ─> delivered=False
                     └──other_error / raised─────> delivered=False (address kept)

There are no retries.  The only exception a caller can see is
``InvalidArgumentError`` for an empty user id or message.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from relaydesk.core.address_directory import (
    InvalidArgumentError,
    require_identifier,
)
from relaydesk.models.delivery import DeliveryResult, DeliveryStatus, SendOutcome

if TYPE_CHECKING:
    from relaydesk.channels import NotificationChannel
    from relaydesk.core.address_directory import AddressDirectory

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Delivers messages to users through an injected directory and channel.

    The dispatcher owns no state.  The directory lock is released after the
    lookup and is never held during the channel call, so a concurrent
    ``record_address`` may land between lookup and send; the send then uses
    the address that was current at lookup time.  Eviction only removes that
    looked-up address, never one recorded while the send was in flight.

    Parameters
    ----------
    directory:
        Where user addresses are looked up and evicted.
    channel:
        The external transport used to push messages.
    """

    def __init__(
        self, directory: AddressDirectory, channel: NotificationChannel
    ) -> None:
        self._directory = directory
        self._channel = channel

    @property
    def directory(self) -> AddressDirectory:
        return self._directory

    @property
    def channel(self) -> NotificationChannel:
        return self._channel

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def notify(self, user_id: str | int, message: str) -> DeliveryResult:
        """Attempt a single delivery of *message* to *user_id*.

        Raises
        ------
        InvalidArgumentError
            If *user_id* or *message* is empty or missing.
        """
        key = require_identifier(user_id, "user_id")
        if not isinstance(message, str) or not message.strip():
            raise InvalidArgumentError("message must be a non-empty string")

        address = self._directory.lookup_address(key)
        if address is None:
            logger.info(
                "No delivery address for user %s; has not started the bot yet", key
            )
            return DeliveryResult.failed(key, DeliveryStatus.NO_ADDRESS)

        try:
            outcome = self._channel.send(address, message)
        except Exception:  # noqa: BLE001
            logger.exception(
                "Channel %s raised while sending to user %s",
                self._channel.channel_name,
                key,
            )
            return DeliveryResult.failed(key, DeliveryStatus.CHANNEL_ERROR)

        if outcome is SendOutcome.ACCEPTED:
            return DeliveryResult.ok(key)

        if outcome is SendOutcome.INVALID_ADDRESS:
            self._directory.evict_address(key, expected_address=address)
            logger.info(
                "Address %s for user %s rejected by %s; evicted",
                address,
                key,
                self._channel.channel_name,
            )
            return DeliveryResult.failed(key, DeliveryStatus.INVALID_ADDRESS)

        logger.warning(
            "Delivery to user %s via %s failed (%s); address kept",
            key,
            self._channel.channel_name,
            getattr(outcome, "value", outcome),
        )
        return DeliveryResult.failed(key, DeliveryStatus.CHANNEL_ERROR)

    def notify_batch(
        self, user_ids: Iterable[str | int], message: str
    ) -> dict[str, DeliveryResult]:
        """Notify several users, returning results keyed by normalized user id."""
        results: dict[str, DeliveryResult] = {}
        for user_id in user_ids:
            result = self.notify(user_id, message)
            results[result.user_id] = result

        delivered = sum(1 for r in results.values() if r.delivered)
        logger.info("Batch notify: %d/%d delivered", delivered, len(results))
        return results
