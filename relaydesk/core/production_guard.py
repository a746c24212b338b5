"""Production configuration guard — enforces hard constraints in production.

The guard validates that production-critical settings are correctly configured
before the relay starts.  It runs once at construction time and fails hard
(raises ``ProductionConfigError``) if any constraint is violated.

This module is the single enforcement point for production invariants.
Other code should not scatter ``if is_production`` checks.
"""

from __future__ import annotations

import logging

from relaydesk.config import RelaySettings

logger = logging.getLogger(__name__)

# Settings that MUST be non-empty in production.
PRODUCTION_REQUIRED_SETTINGS: list[str] = [
    "bot_token",
    "admin_chat_id",
]


class ProductionConfigError(RuntimeError):
    """Raised when production configuration constraints are violated.

    The process cannot safely start in production mode with the current
    configuration.  It must not be caught and ignored.
    """


def enforce_production_constraints(settings: RelaySettings) -> None:
    """Validate all production-critical configuration constraints.

    Constraints enforced
    --------------------
    1. Debug mode must be disabled.
    2. The Telegram channel must be selected (no local outbox).
    3. ``bot_token`` and ``admin_chat_id`` must be configured.

    All violations are collected and reported together.

    Raises
    ------
    ProductionConfigError
        If any production constraint is violated.
    """
    if not settings.is_production:
        return

    violations: list[str] = []

    if settings.debug:
        violations.append(
            "debug=True is not allowed in production. "
            "Set RELAYDESK_DEBUG=false."
        )

    if settings.channel != "telegram":
        violations.append(
            f"channel={settings.channel!r} is not allowed in production. "
            "Set RELAYDESK_CHANNEL=telegram."
        )

    for key_name in PRODUCTION_REQUIRED_SETTINGS:
        if not getattr(settings, key_name, ""):
            violations.append(
                f"{key_name} must be configured in production. "
                f"Set RELAYDESK_{key_name.upper()}."
            )

    if violations:
        msg = "Production configuration violations:\n" + "\n".join(
            f"  - {v}" for v in violations
        )
        logger.critical(msg)
        raise ProductionConfigError(msg)

    logger.info("Production configuration guard passed.")
