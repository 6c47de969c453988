"""Application state assembled from store snapshots, plus the readiness gate."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rosterkeep.domain.model import (
    Account,
    Event,
    Notice,
    Notification,
    RosterMember,
    Song,
    account_from_document,
    event_from_document,
    notice_from_document,
    notification_from_document,
    roster_member_from_document,
    song_from_document,
)
from rosterkeep.domain.ports.store import Collection

if TYPE_CHECKING:
    from rosterkeep.domain.ports.store import Document, Snapshot

type Clock = Callable[[], float]

_TRANSLATORS: dict[Collection, tuple[str, Callable[[Document], object]]] = {
    Collection.ACCOUNTS: ("accounts", account_from_document),
    Collection.ROSTER_MEMBERS: ("members", roster_member_from_document),
    Collection.SONGS: ("songs", song_from_document),
    Collection.NOTICES: ("notices", notice_from_document),
    Collection.EVENTS: ("events", event_from_document),
    Collection.NOTIFICATIONS: ("notifications", notification_from_document),
}


@dataclass(slots=True)
class AppState:
    """Latest snapshot of every collection; each snapshot replaces the previous one."""

    accounts: tuple[Account, ...] = ()
    members: tuple[RosterMember, ...] = ()
    songs: tuple[Song, ...] = ()
    notices: tuple[Notice, ...] = ()
    events: tuple[Event, ...] = ()
    notifications: tuple[Notification, ...] = ()
    loaded: set[Collection] = field(default_factory=set[Collection])
    clock: Clock = time.monotonic
    started_at: float = field(init=False)

    def __post_init__(self) -> None:
        self.started_at = self.clock()

    def apply_snapshot(self, collection: Collection, snapshot: Snapshot) -> None:
        attribute, translate = _TRANSLATORS[collection]
        documents = sorted(snapshot, key=lambda document: document.sequence)
        setattr(self, attribute, tuple(translate(document) for document in documents))
        self.loaded.add(collection)

    def elapsed(self) -> float:
        return self.clock() - self.started_at


@dataclass(frozen=True, slots=True)
class ReadinessGate:
    """Keeps reconciliation away from a snapshot that is still loading.

    The state counts as loading until accounts arrive or the initial-load timeout
    runs out. Reconciliation additionally requires at least one account: an empty
    account collection is never trusted as "genuinely empty".
    """

    initial_load_timeout_seconds: float = 5.0

    def is_loading(self, state: AppState) -> bool:
        if state.accounts:
            return False
        return state.elapsed() < self.initial_load_timeout_seconds

    def is_open(self, state: AppState) -> bool:
        return not self.is_loading(state) and bool(state.accounts)
