"""Port for push-notification delivery."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence


class DeliveryError(RuntimeError):
    """Raised by gateways when a provider rejects or cannot take a delivery."""


@dataclass(frozen=True, slots=True)
class PushMessage:
    title: str
    body: str
    url: str = "/"


@dataclass(frozen=True, slots=True)
class DeliveryReceipt:
    """Provider acknowledgement for one delivery request."""

    provider: str
    reference: str | None = None
    recipients: tuple[str, ...] = field(default_factory=tuple)


@runtime_checkable
class NotificationGateway(Protocol):
    """Deliver a message to the given recipients, or to everyone when ``None``."""

    async def deliver(
        self, message: PushMessage, recipients: Sequence[str] | None = None
    ) -> DeliveryReceipt: ...
