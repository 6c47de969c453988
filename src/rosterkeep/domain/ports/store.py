"""Port for the external document store holding the team collections."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol, runtime_checkable


class Collection(StrEnum):
    """Collections owned by the store; values are the storage names."""

    ACCOUNTS = "users"
    ROSTER_MEMBERS = "members"
    SONGS = "songs"
    NOTICES = "notices"
    EVENTS = "events"
    NOTIFICATIONS = "notifications"


@dataclass(frozen=True, slots=True)
class Document:
    """One stored record: stable id, insertion sequence and raw fields."""

    id: str
    sequence: int
    fields: Mapping[str, object] = field(default_factory=dict[str, object])


type Snapshot = Sequence[Document]
type SnapshotListener = Callable[[Snapshot], None]
type Unsubscribe = Callable[[], None]


class StoreError(RuntimeError):
    """Raised when a store request cannot be completed."""


class DocumentNotFoundError(StoreError):
    """Raised when a write targets a record that no longer exists."""

    def __init__(self, collection: Collection, document_id: str) -> None:
        super().__init__(f"No document {document_id!r} in {collection.value}")
        self.collection = collection
        self.document_id = document_id


@runtime_checkable
class DocumentStore(Protocol):
    """Reactive document store contract.

    ``subscribe`` delivers the full snapshot (ordered by ``sequence``) once on
    registration and again after every change to the collection.
    """

    def subscribe(self, collection: Collection, on_change: SnapshotListener) -> Unsubscribe: ...

    async def fetch(self, collection: Collection) -> list[Document]: ...

    async def insert(self, collection: Collection, fields: Mapping[str, object]) -> str: ...

    async def update(
        self, collection: Collection, document_id: str, fields: Mapping[str, object]
    ) -> None: ...

    async def delete(self, collection: Collection, document_id: str) -> None: ...
