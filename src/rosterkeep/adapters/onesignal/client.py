"""HTTP gateway delivering push notifications through OneSignal."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from rosterkeep.adapters.http_resilience import ResilientClient
from rosterkeep.config.onesignal import ONESIGNAL_BASE_URL, OneSignalConfig, get_onesignal_config
from rosterkeep.domain.ports.notifications import DeliveryError, DeliveryReceipt

from .schema import ErrorResponse, NotificationResponse
from .translator import build_notification_request

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from rosterkeep.config.http_resilience import ResilienceConfig
    from rosterkeep.domain.ports.notifications import PushMessage

log = getLogger(__name__)

NOTIFICATIONS_PATH = "notifications"


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class OneSignalAPIError(DeliveryError):
    """Raised when OneSignal rejects a notification request."""

    def __init__(
        self, message: str, *, status_code: int | None = None, details: object = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


@dataclass(slots=True)
class OneSignalGateway:
    config: OneSignalConfig = field(default_factory=get_onesignal_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    async def deliver(
        self, message: PushMessage, recipients: Sequence[str] | None = None
    ) -> DeliveryReceipt:
        request = build_notification_request(message, recipients, app_id=self.config.app_id)
        headers = {
            "Content-Type": "application/json; charset=utf-8",
            "Authorization": f"Basic {self.config.api_key}",
        }
        url = self.config.resilience.base_url or ONESIGNAL_BASE_URL
        async with self.client_factory(self.config.resilience) as client:
            try:
                response = await client.post(
                    httpx.URL(url).join(NOTIFICATIONS_PATH),
                    json=request.model_dump(exclude_none=True),
                    headers=headers,
                )
            except httpx.HTTPError as exc:
                raise OneSignalAPIError(f"OneSignal request failed: {exc}") from exc

        payload = _json_or_none(response)
        if response.is_error:
            details = _error_details(payload)
            log.error("OneSignal API error %s: %s", response.status_code, details)
            raise OneSignalAPIError(
                "OneSignal API error", status_code=response.status_code, details=details
            )

        try:
            parsed = NotificationResponse.model_validate(payload or {})
        except ValidationError as exc:
            raise OneSignalAPIError("Unexpected OneSignal response payload") from exc
        if parsed.errors and not parsed.id:
            raise OneSignalAPIError(
                "OneSignal accepted no recipients",
                status_code=response.status_code,
                details=parsed.errors,
            )
        return DeliveryReceipt(
            provider="onesignal",
            reference=parsed.id,
            recipients=tuple(request.include_external_user_ids or ()),
        )


def _json_or_none(response: httpx.Response) -> object:
    try:
        return response.json()
    except ValueError:
        return None


def _error_details(payload: object) -> object:
    if not isinstance(payload, dict):
        return payload
    try:
        return ErrorResponse.model_validate(payload).errors
    except ValidationError:
        return payload


if TYPE_CHECKING:
    from rosterkeep.domain.ports.notifications import NotificationGateway

    _gateway_check: NotificationGateway = OneSignalGateway()
