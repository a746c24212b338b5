"""relaydesk: best-effort Telegram notification relay for a Mini-App backend.

Learns which chat each Telegram user can be reached in, delivers messages
only where an address is known, and evicts addresses the Bot API reports
as gone.  Also answers the Mini App's service requests (book download,
1-on-1 consultation, newsletter).
"""

__version__ = "0.1.0"
__description__ = "Address-gated Telegram notification relay for Mini-App backends"

from relaydesk.core.address_directory import (
    AddressDirectory,
    InMemoryAddressDirectory,
    InvalidArgumentError,
    SqliteAddressDirectory,
)
from relaydesk.core.dispatcher import NotificationDispatcher
from relaydesk.core.relay import Relay
from relaydesk.models.delivery import DeliveryResult, SendOutcome

__all__ = [
    "AddressDirectory",
    "DeliveryResult",
    "InMemoryAddressDirectory",
    "InvalidArgumentError",
    "NotificationDispatcher",
    "Relay",
    "SendOutcome",
    "SqliteAddressDirectory",
    "__version__",
]
