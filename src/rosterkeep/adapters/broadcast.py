"""Listener bookkeeping shared by the document store adapters."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rosterkeep.domain.ports.store import (
        Collection,
        Snapshot,
        SnapshotListener,
        Unsubscribe,
    )

log = getLogger(__name__)


@dataclass(slots=True)
class SnapshotBroadcaster:
    """Registry of snapshot listeners per collection."""

    _listeners: defaultdict[Collection, list[SnapshotListener]] = field(
        default_factory=lambda: defaultdict(list)
    )

    def add(self, collection: Collection, listener: SnapshotListener) -> Unsubscribe:
        self._listeners[collection].append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners[collection]
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def has_listeners(self, collection: Collection) -> bool:
        return bool(self._listeners[collection])

    def publish(self, collection: Collection, snapshot: Snapshot) -> None:
        for listener in tuple(self._listeners[collection]):
            listener(snapshot)
        log.debug("Published %s documents of %s", len(snapshot), collection.value)
