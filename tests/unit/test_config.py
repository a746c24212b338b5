"""Tests for runtime settings and the production guard."""

from __future__ import annotations

from pathlib import Path

import pytest

from relaydesk.config import RelaySettings
from relaydesk.core.production_guard import (
    ProductionConfigError,
    enforce_production_constraints,
)

_PROD_KEYS = {"bot_token": "123:ABC", "admin_chat_id": "900"}


class TestRelaySettings:
    def test_defaults(self):
        settings = RelaySettings(_env_file=None)
        assert settings.environment == "development"
        assert settings.log_level == "INFO"
        assert settings.channel == "telegram"
        assert settings.directory_path == Path(".relaydesk/directory.db")

    def test_is_production_false_by_default(self):
        assert RelaySettings(_env_file=None).is_production is False

    def test_is_production_when_set(self):
        assert RelaySettings(_env_file=None, environment="production").is_production

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("RELAYDESK_CHANNEL", "local_outbox")
        monkeypatch.setenv("RELAYDESK_ADMIN_CHAT_ID", "555")
        monkeypatch.setenv("RELAYDESK_REQUEST_TIMEOUT_SECONDS", "2.5")
        settings = RelaySettings(_env_file=None)
        assert settings.channel == "local_outbox"
        assert settings.admin_chat_id == "555"
        assert settings.request_timeout_seconds == 2.5

    def test_unknown_channel_rejected(self):
        with pytest.raises(ValueError):
            RelaySettings(_env_file=None, channel="carrier_pigeon")


class TestProductionGuard:
    def test_development_is_not_guarded(self):
        enforce_production_constraints(
            RelaySettings(_env_file=None, debug=True, channel="local_outbox")
        )

    def test_valid_production_passes(self):
        enforce_production_constraints(
            RelaySettings(_env_file=None, environment="production", **_PROD_KEYS)
        )

    def test_debug_rejected(self):
        settings = RelaySettings(
            _env_file=None, environment="production", debug=True, **_PROD_KEYS
        )
        with pytest.raises(ProductionConfigError, match="debug=True"):
            enforce_production_constraints(settings)

    def test_local_outbox_rejected(self):
        settings = RelaySettings(
            _env_file=None, environment="production", channel="local_outbox", **_PROD_KEYS
        )
        with pytest.raises(ProductionConfigError, match="local_outbox"):
            enforce_production_constraints(settings)

    def test_all_violations_reported_together(self):
        settings = RelaySettings(_env_file=None, environment="production")
        with pytest.raises(ProductionConfigError) as excinfo:
            enforce_production_constraints(settings)
        assert "bot_token" in str(excinfo.value)
        assert "admin_chat_id" in str(excinfo.value)
