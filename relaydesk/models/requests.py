"""Mini-App service request and response models.

The web frontend posts arbitrary JSON.  Every payload is validated into a
``ServiceRequest`` at the boundary, before the service desk touches it.
Two payload shapes are accepted::

    {"service": "newsletter", "user": {...}}
    {"serviceType": "newsletter", "userData": {...}}

The ``user`` object is Telegram's ``WebApp.initDataUnsafe.user``.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


class ServiceKind(str, Enum):
    """Services offered from the Mini App."""

    BOOK_DOWNLOAD = "book_download"
    ONE_ON_ONE = "one_on_one"
    NEWSLETTER = "newsletter"


class MiniAppUser(BaseModel):
    """The Telegram user submitting a request."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int | str
    first_name: str = ""
    last_name: str = ""
    username: str = ""
    email: str = ""

    @field_validator("id")
    @classmethod
    def _id_not_blank(cls, value: int | str) -> int | str:
        if isinstance(value, str) and not value.strip():
            raise ValueError("user id must not be empty")
        return value

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.strip()

    @property
    def user_id(self) -> str:
        return str(self.id)


class ServiceRequest(BaseModel):
    """A validated service request from the Mini App."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    service: ServiceKind = Field(
        validation_alias=AliasChoices("service", "serviceType"),
    )
    user: MiniAppUser = Field(
        validation_alias=AliasChoices("user", "userData"),
    )


class ServiceResponse(BaseModel):
    """The JSON body returned to the Mini App."""

    model_config = ConfigDict(frozen=True)

    status: Literal["success", "error"]
    message: str
    action: str | None = None
    url: str | None = None
    delivered: bool = False

    @classmethod
    def error(cls, message: str) -> ServiceResponse:
        return cls(status="error", message=message)

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize without the unset optional keys."""
        return self.model_dump(mode="json", exclude_none=True)


class RequestLogEntry(BaseModel):
    """One row of the request log."""

    model_config = ConfigDict(frozen=True)

    entry_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    user_id: str
    first_name: str = ""
    service: str
    status: str


class Subscriber(BaseModel):
    """A newsletter subscriber."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    email: str
    first_name: str = ""
    subscribed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
