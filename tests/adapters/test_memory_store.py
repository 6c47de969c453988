from __future__ import annotations

import asyncio

import pytest

from rosterkeep.adapters.memory import InMemoryDocumentStore, generate_document_id
from rosterkeep.domain.ports.store import (
    Collection,
    DocumentNotFoundError,
    DocumentStore,
    Snapshot,
)


def test_generated_ids_look_like_store_ids() -> None:
    document_id = generate_document_id()

    assert len(document_id) == 20
    assert not document_id.startswith("@")


def test_store_satisfies_port() -> None:
    assert isinstance(InMemoryDocumentStore(), DocumentStore)


def test_subscribe_delivers_initial_and_changed_snapshots() -> None:
    store = InMemoryDocumentStore()
    store.seed(Collection.SONGS, {"title": "Oceans"})
    received: list[list[str]] = []

    def listener(snapshot: Snapshot) -> None:
        received.append([str(document.fields["title"]) for document in snapshot])

    unsubscribe = store.subscribe(Collection.SONGS, listener)
    asyncio.run(store.insert(Collection.SONGS, {"title": "Way Maker"}))
    asyncio.run(store.insert(Collection.NOTICES, {"title": "Not a song"}))
    unsubscribe()
    asyncio.run(store.insert(Collection.SONGS, {"title": "Unheard"}))

    assert received == [["Oceans"], ["Oceans", "Way Maker"]]


def test_update_merges_fields_and_keeps_sequence() -> None:
    store = InMemoryDocumentStore()
    first = store.seed(Collection.ROSTER_MEMBERS, {"name": "Ana", "status": "Active"})
    store.seed(Collection.ROSTER_MEMBERS, {"name": "Luis"})

    asyncio.run(store.update(Collection.ROSTER_MEMBERS, first, {"username": "@ana"}))

    documents = store.snapshot(Collection.ROSTER_MEMBERS)
    assert documents[0].id == first
    assert documents[0].fields == {"name": "Ana", "status": "Active", "username": "@ana"}


def test_writes_against_missing_documents_raise() -> None:
    store = InMemoryDocumentStore()

    with pytest.raises(DocumentNotFoundError):
        asyncio.run(store.update(Collection.ACCOUNTS, "missing", {"name": "x"}))
    with pytest.raises(DocumentNotFoundError):
        asyncio.run(store.delete(Collection.ACCOUNTS, "missing"))
