"""Translate push messages into OneSignal requests."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Final

from .schema import NotificationRequest

if TYPE_CHECKING:
    from collections.abc import Sequence

    from rosterkeep.domain.ports.notifications import PushMessage

ALL_SUBSCRIBERS_SEGMENT: Final[str] = "All"
LANGUAGE: Final[str] = "en"


def build_notification_request(
    message: PushMessage,
    recipients: Sequence[str] | None,
    *,
    app_id: str,
    idempotency_key: str | None = None,
) -> NotificationRequest:
    """Target the given external user ids, or every subscriber when there are none."""

    targets = [recipient for recipient in recipients or () if recipient]
    return NotificationRequest(
        app_id=app_id,
        headings={LANGUAGE: message.title},
        contents={LANGUAGE: message.body},
        url=message.url or "/",
        external_id=idempotency_key or str(uuid.uuid4()),
        include_external_user_ids=targets or None,
        included_segments=None if targets else [ALL_SUBSCRIBERS_SEGMENT],
    )
