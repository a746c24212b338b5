"""Runtime configuration — env-driven.

Centralized settings using pydantic-settings. Reads from a .env file and
RELAYDESK_* environment variables.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class RelaySettings(BaseSettings):
    """Runtime settings with environment variable overrides.

    All settings can be overridden via RELAYDESK_* environment variables
    or a .env file in the working directory.

    Examples
    --------
    Override via environment::

        export RELAYDESK_ENVIRONMENT=production
        export RELAYDESK_BOT_TOKEN=123456:ABC...
        export RELAYDESK_ADMIN_CHAT_ID=987654321

    Or via .env file::

        RELAYDESK_CHANNEL=local_outbox
        RELAYDESK_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="RELAYDESK_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Storage paths
    directory_path: Path = Path(".relaydesk/directory.db")
    request_log_path: Path = Path(".relaydesk/requests.db")
    subscriptions_path: Path = Path(".relaydesk/subscriptions.db")
    outbox_path: Path = Path(".relaydesk/outbox")

    # Notification channel
    channel: Literal["telegram", "local_outbox"] = "telegram"
    bot_token: str = ""
    telegram_api_base: str = "https://api.telegram.org"
    request_timeout_seconds: float = 10.0
    parse_mode: str = ""

    # Service desk
    admin_chat_id: str = ""
    book_download_url: str = ""

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"


# Module-level singleton: import as `from relaydesk.config import settings`
settings = RelaySettings()
