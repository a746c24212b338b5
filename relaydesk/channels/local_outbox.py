"""Local outbox channel — writes outgoing messages to local JSON files.

Layout: {base_path}/{address}/{message_id}.json

Stands in for Telegram during local development.  Every send is accepted.
"""

from __future__ import annotations

import json
import logging
import re
import uuid
from datetime import datetime, timezone
from pathlib import Path

from relaydesk.channels._formatting import canonical_json_bytes
from relaydesk.models.delivery import SendOutcome

logger = logging.getLogger(__name__)

_UNSAFE_PATH_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class LocalOutboxChannel:
    """Writes each message to a JSON file under the address's directory.

    Parameters
    ----------
    base_path:
        Root directory for outbox files.  Defaults to ``.relaydesk/outbox``.
    """

    def __init__(self, base_path: Path | str | None = None) -> None:
        self._base = Path(base_path) if base_path else Path(".relaydesk/outbox")
        self._base.mkdir(parents=True, exist_ok=True)

    @property
    def channel_name(self) -> str:
        return "local_outbox"

    def _address_dir(self, address: str) -> Path:
        return self._base / _UNSAFE_PATH_CHARS.sub("_", str(address))

    def send(self, address: str, message: str) -> SendOutcome:
        """Write the message to ``{base}/{address}/{message_id}.json``."""
        message_id = uuid.uuid4().hex
        target_dir = self._address_dir(address)
        target_dir.mkdir(parents=True, exist_ok=True)

        target_file = target_dir / f"{message_id}.json"
        data = {
            "message_id": message_id,
            "address": str(address),
            "text": message,
            "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        }
        target_file.write_bytes(canonical_json_bytes(data))

        logger.debug("LocalOutboxChannel: wrote %s to %s", message_id, target_file)
        return SendOutcome.ACCEPTED

    def list_messages(self, address: str | None = None) -> list[Path]:
        """List outbox files, optionally for one address, oldest first."""
        root = self._address_dir(address) if address is not None else self._base
        if not root.exists():
            return []
        files = root.glob("*.json") if address is not None else root.rglob("*.json")
        return sorted(files, key=lambda p: (p.stat().st_mtime_ns, p.name))

    def read_message(self, path: Path) -> dict:
        """Read and parse a single outbox file."""
        return json.loads(path.read_bytes())

    def close(self) -> None:
        """Nothing to release."""
