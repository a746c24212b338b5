"""Service desk — answers Mini-App service requests.

Each request is validated into a ``ServiceRequest``, handled by the
service-specific handler, confirmed to the user through the dispatcher
(best-effort) and recorded in the request log.  Handler errors become
``status="error"`` responses; they never escape ``handle()``.

Services
--------
book_download
    Returns the configured download URL and sends the link to the user.
one_on_one
    Confirms the request to the user and alerts the admin chat.
newsletter
    Subscribes ``user.email``; a repeated email is rejected.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from relaydesk.channels._formatting import format_user_label
from relaydesk.core.subscriptions import AlreadySubscribedError
from relaydesk.models.delivery import DeliveryResult, SendOutcome
from relaydesk.models.requests import ServiceKind, ServiceRequest, ServiceResponse

if TYPE_CHECKING:
    from relaydesk.config import RelaySettings
    from relaydesk.core.dispatcher import NotificationDispatcher
    from relaydesk.core.request_log import RequestLog
    from relaydesk.core.subscriptions import SubscriptionStore

logger = logging.getLogger(__name__)

ONE_ON_ONE_CONFIRMATION = "Your 1:1 request has been received! We'll contact you soon."
NEWSLETTER_CONFIRMATION = "You're subscribed to the newsletter. Thank you!"
START_BOT_HINT = (
    "We couldn't message you on Telegram. "
    "Please start a conversation with the bot first."
)


class ServiceError(RuntimeError):
    """A service could not be provided; the message is shown to the user."""


class ServiceDesk:
    """Handles service requests from the Mini App.

    Parameters
    ----------
    dispatcher:
        Used to confirm requests to users and to reach the admin chat.
    request_log:
        Receives one entry per handled request.
    subscriptions:
        Newsletter subscriber store.
    settings:
        Supplies ``admin_chat_id`` and ``book_download_url``.
    """

    def __init__(
        self,
        dispatcher: NotificationDispatcher,
        request_log: RequestLog,
        subscriptions: SubscriptionStore,
        settings: RelaySettings,
    ) -> None:
        self._dispatcher = dispatcher
        self._request_log = request_log
        self._subscriptions = subscriptions
        self._settings = settings
        self._handlers: dict[ServiceKind, Callable[[ServiceRequest], ServiceResponse]] = {
            ServiceKind.BOOK_DOWNLOAD: self._handle_book_download,
            ServiceKind.ONE_ON_ONE: self._handle_one_on_one,
            ServiceKind.NEWSLETTER: self._handle_newsletter,
        }

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def handle(self, payload: dict[str, Any] | ServiceRequest) -> ServiceResponse:
        """Validate and handle one request, always returning a response."""
        try:
            request = (
                payload
                if isinstance(payload, ServiceRequest)
                else ServiceRequest.model_validate(payload)
            )
        except ValidationError as exc:
            message = _describe_validation_error(exc)
            self._log_rejected(payload, message)
            logger.info("Rejected invalid service request: %s", message)
            return ServiceResponse.error(message)

        try:
            response = self._handlers[request.service](request)
        except (ServiceError, AlreadySubscribedError, ValueError) as exc:
            self._request_log.append(
                request.user.user_id,
                request.service.value,
                f"error: {exc}",
                first_name=request.user.first_name,
            )
            return ServiceResponse.error(str(exc))

        self._request_log.append(
            request.user.user_id,
            request.service.value,
            "success",
            first_name=request.user.first_name,
        )
        return response

    def broadcast_newsletter(self, message: str) -> dict[str, DeliveryResult]:
        """Send *message* to every subscriber that has a known address."""
        user_ids = dict.fromkeys(s.user_id for s in self._subscriptions.list_subscribers())
        return self._dispatcher.notify_batch(user_ids, message)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _handle_book_download(self, request: ServiceRequest) -> ServiceResponse:
        url = self._settings.book_download_url
        if not url:
            raise ServiceError("Book download is not available")

        result = self._dispatcher.notify(
            request.user.user_id, f"Here is your book collection: {url}"
        )
        return ServiceResponse(
            status="success",
            message="Download ready",
            action="download",
            url=url,
            delivered=result.delivered,
        )

    def _handle_one_on_one(self, request: ServiceRequest) -> ServiceResponse:
        result = self._dispatcher.notify(request.user.user_id, ONE_ON_ONE_CONFIRMATION)
        self._alert_admin(
            "New 1:1 request from "
            + format_user_label(request.user.first_name, request.user.username)
        )
        return _confirmed("1:1 request submitted", result)

    def _handle_newsletter(self, request: ServiceRequest) -> ServiceResponse:
        if not request.user.email:
            raise ServiceError("An email address is required for the newsletter")

        self._subscriptions.subscribe(
            request.user.user_id,
            request.user.email,
            first_name=request.user.first_name,
        )
        result = self._dispatcher.notify(request.user.user_id, NEWSLETTER_CONFIRMATION)
        return _confirmed("Newsletter subscription confirmed", result)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _alert_admin(self, text: str) -> bool:
        """Send *text* straight to the admin chat.  Returns whether it was accepted."""
        admin_chat_id = self._settings.admin_chat_id
        if not admin_chat_id:
            logger.warning("No admin chat configured; admin alert skipped: %s", text)
            return False

        channel = self._dispatcher.channel
        try:
            outcome = channel.send(admin_chat_id, text)
        except Exception:  # noqa: BLE001
            logger.exception("Admin alert via %s raised", channel.channel_name)
            return False

        if outcome is not SendOutcome.ACCEPTED:
            logger.warning("Admin alert not delivered (%s)", outcome.value)
            return False
        return True

    def _log_rejected(self, payload: Any, message: str) -> None:
        user: Any = {}
        if isinstance(payload, dict):
            user = payload.get("user") or payload.get("userData") or {}
        if not isinstance(user, dict):
            user = {}
        self._request_log.append(
            user.get("id", "unknown"),
            "unknown",
            f"error: {message}",
            first_name=str(user.get("first_name", "")),
        )


def _confirmed(message: str, result: DeliveryResult) -> ServiceResponse:
    if not result.delivered:
        message = f"{message}. {START_BOT_HINT}"
    return ServiceResponse(status="success", message=message, delivered=result.delivered)


def _describe_validation_error(exc: ValidationError) -> str:
    locations = {str(err["loc"][0]) for err in exc.errors() if err.get("loc")}
    if locations & {"service", "serviceType"}:
        return "Unknown or missing service"
    if locations & {"user", "userData"}:
        return "Missing or invalid user"
    return "Invalid request"
