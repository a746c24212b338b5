"""Tests for all Pydantic data models — validation, immutability, defaults."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from relaydesk.models.delivery import (
    AddressEntry,
    DeliveryResult,
    DeliveryStatus,
    SendOutcome,
)
from relaydesk.models.requests import (
    MiniAppUser,
    ServiceKind,
    ServiceRequest,
    ServiceResponse,
)


class TestDeliveryModels:
    def test_send_outcome_values(self):
        assert SendOutcome.ACCEPTED == "accepted"
        assert SendOutcome.INVALID_ADDRESS == "invalid_address"
        assert SendOutcome.OTHER_ERROR == "other_error"

    def test_ok_result(self):
        result = DeliveryResult.ok("42")
        assert result.delivered is True
        assert result.status is DeliveryStatus.ACCEPTED

    def test_failed_result(self):
        result = DeliveryResult.failed("42", DeliveryStatus.NO_ADDRESS)
        assert result.delivered is False
        assert result.user_id == "42"

    def test_result_is_frozen(self):
        result = DeliveryResult.ok("42")
        with pytest.raises(ValidationError):
            result.delivered = False  # type: ignore[misc]

    def test_address_entry_defaults_timestamp(self):
        entry = AddressEntry(user_id="42", address="chat-7")
        assert entry.updated_at.tzinfo is not None


class TestRequestModels:
    def test_service_kinds(self):
        assert {k.value for k in ServiceKind} == {"book_download", "one_on_one", "newsletter"}

    def test_user_extra_fields_ignored(self):
        user = MiniAppUser.model_validate(
            {"id": 1, "first_name": "Ann", "language_code": "en", "is_premium": True}
        )
        assert user.first_name == "Ann"
        assert not hasattr(user, "language_code")

    def test_user_id_normalized(self):
        assert MiniAppUser(id=42).user_id == "42"
        assert MiniAppUser(id="42").user_id == "42"

    def test_email_stripped(self):
        assert MiniAppUser(id=1, email="  a@b.org ").email == "a@b.org"

    def test_canonical_payload_shape(self):
        request = ServiceRequest.model_validate(
            {"service": "one_on_one", "user": {"id": 1}}
        )
        assert request.service is ServiceKind.ONE_ON_ONE

    def test_response_json_omits_unset_optionals(self):
        body = ServiceResponse(status="success", message="ok").to_json_dict()
        assert body == {"status": "success", "message": "ok", "delivered": False}

    def test_error_response(self):
        response = ServiceResponse.error("nope")
        assert response.status == "error"
        assert response.message == "nope"

    def test_invalid_status_rejected(self):
        with pytest.raises(ValidationError):
            ServiceResponse(status="maybe", message="?")  # type: ignore[arg-type]
