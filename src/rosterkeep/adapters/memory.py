"""Process-local document store and notification gateway."""

from __future__ import annotations

import itertools
import uuid
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from rosterkeep.domain.ports.notifications import DeliveryReceipt
from rosterkeep.domain.ports.store import Collection, Document, DocumentNotFoundError

from .broadcast import SnapshotBroadcaster

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence

    from rosterkeep.domain.ports.notifications import PushMessage
    from rosterkeep.domain.ports.store import SnapshotListener, Unsubscribe

log = getLogger(__name__)


def generate_document_id() -> str:
    """Return a 20-character id shaped like the hosted store's generated ids."""

    return uuid.uuid4().hex[:20]


@dataclass(slots=True)
class InMemoryDocumentStore:
    """Dict-backed store with the same snapshot semantics as the hosted one."""

    _documents: dict[Collection, dict[str, Document]] = field(
        default_factory=lambda: {collection: {} for collection in Collection}
    )
    _sequence: Iterator[int] = field(default_factory=lambda: itertools.count(1))
    _broadcaster: SnapshotBroadcaster = field(default_factory=SnapshotBroadcaster)

    def snapshot(self, collection: Collection) -> list[Document]:
        return sorted(self._documents[collection].values(), key=lambda doc: doc.sequence)

    def subscribe(self, collection: Collection, on_change: SnapshotListener) -> Unsubscribe:
        unsubscribe = self._broadcaster.add(collection, on_change)
        on_change(self.snapshot(collection))
        return unsubscribe

    async def fetch(self, collection: Collection) -> list[Document]:
        return self.snapshot(collection)

    def seed(
        self,
        collection: Collection,
        fields: Mapping[str, object],
        *,
        document_id: str | None = None,
    ) -> str:
        """Insert without notifying listeners (fixtures, imports)."""

        resolved_id = document_id or generate_document_id()
        self._documents[collection][resolved_id] = Document(
            id=resolved_id, sequence=next(self._sequence), fields=dict(fields)
        )
        return resolved_id

    async def insert(self, collection: Collection, fields: Mapping[str, object]) -> str:
        document_id = self.seed(collection, fields)
        self._broadcaster.publish(collection, self.snapshot(collection))
        return document_id

    async def update(
        self, collection: Collection, document_id: str, fields: Mapping[str, object]
    ) -> None:
        current = self._documents[collection].get(document_id)
        if current is None:
            raise DocumentNotFoundError(collection, document_id)
        self._documents[collection][document_id] = Document(
            id=document_id,
            sequence=current.sequence,
            fields={**current.fields, **fields},
        )
        self._broadcaster.publish(collection, self.snapshot(collection))

    async def delete(self, collection: Collection, document_id: str) -> None:
        if self._documents[collection].pop(document_id, None) is None:
            raise DocumentNotFoundError(collection, document_id)
        self._broadcaster.publish(collection, self.snapshot(collection))


@dataclass(slots=True)
class LogNotificationGateway:
    """Write push messages to the log instead of a provider."""

    delivered: list[tuple[PushMessage, tuple[str, ...]]] = field(
        default_factory=list[tuple["PushMessage", tuple[str, ...]]]
    )

    async def deliver(
        self, message: PushMessage, recipients: Sequence[str] | None = None
    ) -> DeliveryReceipt:
        targets = tuple(recipients or ())
        self.delivered.append((message, targets))
        log.info(
            "[push] %s: %s (to=%s)", message.title, message.body, ", ".join(targets) or "all"
        )
        return DeliveryReceipt(provider="log", recipients=targets)


if TYPE_CHECKING:
    from rosterkeep.domain.ports.notifications import NotificationGateway
    from rosterkeep.domain.ports.store import DocumentStore

    _store_check: DocumentStore = InMemoryDocumentStore()
    _gateway_check: NotificationGateway = LogNotificationGateway()
