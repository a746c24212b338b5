"""Notification channel protocol.

A channel is the external transport that pushes a message to a delivery
address.  All channels implement the ``NotificationChannel`` protocol: a
``channel_name`` property and a ``send(address, message)`` method that
reports a ``SendOutcome`` instead of raising for delivery failures.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from relaydesk.models.delivery import SendOutcome


@runtime_checkable
class NotificationChannel(Protocol):
    """Protocol that every relaydesk channel must implement.

    Attributes
    ----------
    channel_name : str
        A human-readable identifier for this channel instance
        (e.g. ``"telegram"``, ``"local_outbox"``).
    """

    @property
    def channel_name(self) -> str:
        """Return the name of this channel."""
        ...

    def send(self, address: str, message: str) -> SendOutcome:
        """Push *message* to *address*.

        Returns ``SendOutcome.ACCEPTED`` when the transport took the message,
        ``SendOutcome.INVALID_ADDRESS`` when the transport definitively
        rejected the address as unreachable, and ``SendOutcome.OTHER_ERROR``
        for anything else.  Implementations should not raise for delivery
        failures; the dispatcher still guards against it.
        """
        ...
