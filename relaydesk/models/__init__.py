"""relaydesk data models — all Pydantic v2, all frozen (immutable)."""

from relaydesk.models.delivery import (
    AddressEntry,
    DeliveryResult,
    DeliveryStatus,
    SendOutcome,
)
from relaydesk.models.requests import (
    MiniAppUser,
    RequestLogEntry,
    ServiceKind,
    ServiceRequest,
    ServiceResponse,
    Subscriber,
)

__all__ = [
    # delivery
    "AddressEntry",
    "DeliveryResult",
    "DeliveryStatus",
    "SendOutcome",
    # requests
    "MiniAppUser",
    "RequestLogEntry",
    "ServiceKind",
    "ServiceRequest",
    "ServiceResponse",
    "Subscriber",
]
