"""Builders for store documents and records used across tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rosterkeep.adapters.memory import InMemoryDocumentStore
from rosterkeep.domain.model import (
    Account,
    RosterMember,
    Song,
    account_from_document,
    roster_member_from_document,
    song_from_document,
)
from rosterkeep.domain.ports.store import Collection, Document, StoreError

if TYPE_CHECKING:
    from collections.abc import Mapping

# Shaped like store-generated ids: 20 characters, no "@".
LEGACY_ID_ANA = "m1XyZaBcDeFgHiJkLmNo"
LEGACY_ID_LUIS = "m2XyZaBcDeFgHiJkLmNo"


def seed_account(
    store: InMemoryDocumentStore,
    name: str,
    handle: str | None,
    *,
    document_id: str | None = None,
    **extra: object,
) -> str:
    fields: dict[str, object] = {"name": name, "password": "secret", "role": "Musician", **extra}
    if handle is not None:
        fields["username"] = handle
    return store.seed(Collection.ACCOUNTS, fields, document_id=document_id)


def seed_member(
    store: InMemoryDocumentStore,
    name: str,
    handle: str | None = None,
    *,
    document_id: str | None = None,
    **extra: object,
) -> str:
    fields: dict[str, object] = {"name": name, "role": "Musician", "status": "Active", **extra}
    if handle is not None:
        fields["username"] = handle
    return store.seed(Collection.ROSTER_MEMBERS, fields, document_id=document_id)


def seed_song(
    store: InMemoryDocumentStore,
    title: str,
    assigned: list[object],
    *,
    document_id: str | None = None,
) -> str:
    return store.seed(
        Collection.SONGS,
        {"title": title, "artist": "Band", "assignedMusicians": assigned},
        document_id=document_id,
    )


def fields_of(store: InMemoryDocumentStore, collection: Collection) -> list[Mapping[str, object]]:
    return [document.fields for document in store.snapshot(collection)]


def make_account(
    record_id: str, name: str | None, handle: str | None, *, sequence: int = 0, **fields: object
) -> Account:
    body: dict[str, object] = {"name": name, "username": handle, **fields}
    return account_from_document(Document(id=record_id, sequence=sequence, fields=body))


def make_member(
    record_id: str,
    name: str | None,
    handle: str | None = None,
    *,
    sequence: int = 0,
    **fields: object,
) -> RosterMember:
    body: dict[str, object] = {"name": name, "username": handle, **fields}
    return roster_member_from_document(Document(id=record_id, sequence=sequence, fields=body))


def make_song(
    record_id: str, title: str, assigned: list[object], *, sequence: int = 0
) -> Song:
    body: dict[str, object] = {"title": title, "assignedMusicians": assigned}
    return song_from_document(Document(id=record_id, sequence=sequence, fields=body))


class FailingDocumentStore(InMemoryDocumentStore):
    """In-memory store that rejects writes against chosen document ids."""

    def __init__(self, failing_ids: set[str] | None = None) -> None:
        super().__init__()
        self.failing_ids = set(failing_ids or ())
        self.write_attempts: list[tuple[str, str]] = []

    def _check(self, operation: str, document_id: str) -> None:
        self.write_attempts.append((operation, document_id))
        if document_id in self.failing_ids:
            raise StoreError(f"permission denied for {document_id}")

    async def update(
        self, collection: Collection, document_id: str, fields: Mapping[str, object]
    ) -> None:
        self._check("update", document_id)
        await super().update(collection, document_id, fields)

    async def delete(self, collection: Collection, document_id: str) -> None:
        self._check("delete", document_id)
        await super().delete(collection, document_id)
