from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING

import httpx
import pytest

from rosterkeep.adapters.http_resilience import ResilientClient
from rosterkeep.adapters.onesignal import (
    OneSignalAPIError,
    OneSignalGateway,
    build_notification_request,
)
from rosterkeep.config import OneSignalConfig, ResilienceConfig, RetryPolicy
from rosterkeep.domain.ports.notifications import NotificationGateway, PushMessage

if TYPE_CHECKING:
    from collections.abc import Callable

MESSAGE = PushMessage(title="New Music", body="Ana just uploaded a new song: Oceans")


def _config() -> OneSignalConfig:
    return OneSignalConfig(
        app_id="app-123",
        api_key="rest-key",
        resilience=ResilienceConfig(name="onesignal", base_url="https://onesignal.test/api/v1/"),
    )


def _factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    def factory(resilience: ResilienceConfig) -> ResilientClient:
        return ResilientClient(resilience, transport=httpx.MockTransport(handler))

    return factory


def test_request_targets_everyone_without_recipients() -> None:
    request = build_notification_request(MESSAGE, None, app_id="app-123", idempotency_key="k1")

    assert request.included_segments == ["All"]
    assert request.include_external_user_ids is None
    assert request.headings == {"en": "New Music"}
    assert request.external_id == "k1"


def test_request_targets_given_recipients() -> None:
    request = build_notification_request(MESSAGE, ["u1", "", "u2"], app_id="app-123")

    assert request.include_external_user_ids == ["u1", "u2"]
    assert request.included_segments is None
    assert request.external_id


def test_gateway_satisfies_port() -> None:
    assert isinstance(OneSignalGateway(config=_config()), NotificationGateway)


def test_deliver_posts_notification() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"id": "notif-1", "recipients": 2})

    gateway = OneSignalGateway(config=_config(), client_factory=_factory(handler))

    receipt = asyncio.run(gateway.deliver(MESSAGE, ["u1", "u2"]))

    assert receipt.provider == "onesignal"
    assert receipt.reference == "notif-1"
    assert receipt.recipients == ("u1", "u2")
    [request] = captured
    assert request.method == "POST"
    assert str(request.url) == "https://onesignal.test/api/v1/notifications"
    assert request.headers["Authorization"] == "Basic rest-key"
    body = json.loads(request.content)
    assert body["app_id"] == "app-123"
    assert body["contents"] == {"en": MESSAGE.body}
    assert body["include_external_user_ids"] == ["u1", "u2"]
    assert "included_segments" not in body


def test_deliver_raises_on_error_status(caplog: pytest.LogCaptureFixture) -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"errors": ["Invalid app_id"]})

    gateway = OneSignalGateway(config=_config(), client_factory=_factory(handler))

    with caplog.at_level("ERROR"), pytest.raises(OneSignalAPIError) as excinfo:
        asyncio.run(gateway.deliver(MESSAGE))

    assert excinfo.value.status_code == 400
    assert excinfo.value.details == ["Invalid app_id"]
    [record] = [r for r in caplog.records if r.name.startswith("rosterkeep.adapters.onesignal")]
    assert record.args == (400, ["Invalid app_id"])
    assert record.getMessage() == "OneSignal API error 400: ['Invalid app_id']"


def test_deliver_raises_when_no_one_was_reached() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json={"id": "", "errors": ["All included players are not subscribed"]}
        )

    gateway = OneSignalGateway(config=_config(), client_factory=_factory(handler))

    with pytest.raises(OneSignalAPIError):
        asyncio.run(gateway.deliver(MESSAGE, ["u1"]))


def test_deliver_wraps_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    config = _config()
    no_retry = OneSignalConfig(
        app_id=config.app_id,
        api_key=config.api_key,
        resilience=ResilienceConfig(
            name="onesignal",
            base_url=config.resilience.base_url,
            retry=RetryPolicy(total=0),
        ),
    )
    gateway = OneSignalGateway(config=no_retry, client_factory=_factory(handler))

    with pytest.raises(OneSignalAPIError):
        asyncio.run(gateway.deliver(MESSAGE))

