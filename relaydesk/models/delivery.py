"""Address directory entries and delivery results."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SendOutcome(str, Enum):
    """What an external notification channel reports for a single send."""

    ACCEPTED = "accepted"
    INVALID_ADDRESS = "invalid_address"
    OTHER_ERROR = "other_error"


class DeliveryStatus(str, Enum):
    """Why a ``notify`` call ended the way it did."""

    NO_ADDRESS = "no_address"
    ACCEPTED = "accepted"
    INVALID_ADDRESS = "invalid_address"
    CHANNEL_ERROR = "channel_error"


class AddressEntry(BaseModel):
    """The current delivery address known for one user."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    address: str
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class DeliveryResult(BaseModel):
    """Outcome of a single best-effort delivery.

    ``delivered`` is True only when the channel accepted the message.
    ``status`` carries the reason so callers can pick user-facing wording.
    """

    model_config = ConfigDict(frozen=True)

    delivered: bool
    status: DeliveryStatus
    user_id: str = ""

    @classmethod
    def ok(cls, user_id: str) -> DeliveryResult:
        return cls(delivered=True, status=DeliveryStatus.ACCEPTED, user_id=user_id)

    @classmethod
    def failed(cls, user_id: str, status: DeliveryStatus) -> DeliveryResult:
        return cls(delivered=False, status=status, user_id=user_id)
