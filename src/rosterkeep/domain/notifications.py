"""In-app notifications and push fan-out for leader announcements."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from rosterkeep.domain.model import Notification, NotificationKind, notification_to_fields
from rosterkeep.domain.ports.notifications import DeliveryError, PushMessage
from rosterkeep.domain.ports.store import Collection, StoreError
from rosterkeep.domain.reconciliation.outcome import WriteOutcome, attempt_update

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from rosterkeep.domain.model import Notice
    from rosterkeep.domain.ports.notifications import DeliveryReceipt, NotificationGateway
    from rosterkeep.domain.ports.store import DocumentStore

log = getLogger(__name__)

_ANNOUNCEMENTS: dict[NotificationKind, tuple[str, str]] = {
    NotificationKind.SONG: ("New Music", "{leader} just uploaded a new song: {title}"),
    NotificationKind.NOTICE: ("New Official Notice", "{leader} just published a notice: {title}"),
    NotificationKind.EVENT: ("New Event Scheduled", "{leader} scheduled a new event: {title}"),
}


@dataclass(slots=True)
class AnnouncementResult:
    message: PushMessage
    notification_id: str | None = None
    receipt: DeliveryReceipt | None = None
    errors: list[str] = field(default_factory=list[str])

    @property
    def delivered(self) -> bool:
        return self.receipt is not None


def compose_announcement(
    leader_name: str, kind: NotificationKind, content_title: str
) -> PushMessage:
    title, template = _ANNOUNCEMENTS[kind]
    return PushMessage(title=title, body=template.format(leader=leader_name, title=content_title))


async def record_notification(
    store: DocumentStore,
    kind: NotificationKind,
    title: str,
    message: str,
    *,
    now: datetime | None = None,
) -> str:
    notification = Notification(
        id="",
        title=title,
        message=message,
        timestamp=(now or datetime.now(UTC)).isoformat(),
        kind=kind,
    )
    return await store.insert(Collection.NOTIFICATIONS, notification_to_fields(notification))


async def mark_notifications_read(
    store: DocumentStore, notifications: Iterable[Notification]
) -> list[WriteOutcome]:
    outcomes: list[WriteOutcome] = []
    for notification in notifications:
        if notification.read:
            continue
        outcomes.append(
            await attempt_update(
                store, Collection.NOTIFICATIONS, notification.id, {"isRead": True}
            )
        )
    return outcomes


async def announce(
    store: DocumentStore,
    gateway: NotificationGateway,
    *,
    leader_name: str,
    kind: NotificationKind,
    content_title: str,
    recipients: Sequence[str] | None = None,
    now: datetime | None = None,
) -> AnnouncementResult:
    """Record an in-app notification and push it; failures are reported, not raised."""

    message = compose_announcement(leader_name, kind, content_title)
    result = AnnouncementResult(message=message)
    try:
        result.notification_id = await record_notification(
            store, kind, message.title, message.body, now=now
        )
    except StoreError as exc:
        log.warning("Could not record notification %r: %s", message.title, exc)
        result.errors.append(str(exc))

    try:
        result.receipt = await gateway.deliver(message, recipients)
    except DeliveryError as exc:
        log.warning("Push delivery failed for %r: %s", message.title, exc)
        result.errors.append(str(exc))
    return result


def sort_notices(notices: Iterable[Notice]) -> list[Notice]:
    """Pinned notices first, then newest first (ISO dates sort lexically)."""

    by_date = sorted(notices, key=lambda notice: notice.date, reverse=True)
    return sorted(by_date, key=lambda notice: not notice.pinned)
