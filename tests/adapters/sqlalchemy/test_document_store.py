from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import inspect, select

from rosterkeep.adapters.sqlalchemy import SqlAlchemyDocumentStore, documents_table
from rosterkeep.domain.ports.store import (
    Collection,
    Document,
    DocumentNotFoundError,
    DocumentStore,
    Snapshot,
    StoreError,
)
from rosterkeep.domain.reconciliation import WriteStatus, attempt_update

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def test_create_all_tables_creates_documents_table(sqlite_engine: Engine) -> None:
    assert "documents" in inspect(sqlite_engine).get_table_names()


def test_store_satisfies_port(sqlite_store: SqlAlchemyDocumentStore) -> None:
    assert isinstance(sqlite_store, DocumentStore)


def test_insert_and_fetch_in_insertion_order(sqlite_store: SqlAlchemyDocumentStore) -> None:
    async def run() -> list[str]:
        first = await sqlite_store.insert(Collection.ACCOUNTS, {"name": "Ana"})
        await sqlite_store.insert(Collection.SONGS, {"title": "Oceans"})
        second = await sqlite_store.insert(Collection.ACCOUNTS, {"name": "Luis"})
        documents = await sqlite_store.fetch(Collection.ACCOUNTS)
        assert [document.id for document in documents] == [first, second]
        return [str(document.fields["name"]) for document in documents]

    assert asyncio.run(run()) == ["Ana", "Luis"]


def test_update_merges_body(sqlite_store: SqlAlchemyDocumentStore, sqlite_engine: Engine) -> None:
    async def run() -> str:
        document_id = await sqlite_store.insert(Collection.SONGS, {"title": "Oceans"})
        await sqlite_store.update(
            Collection.SONGS, document_id, {"assignedMusicians": ["@ana", "@luis"]}
        )
        return document_id

    document_id = asyncio.run(run())

    with sqlite_engine.connect() as connection:
        body = connection.execute(
            select(documents_table.c.body).where(documents_table.c.document_id == document_id)
        ).scalar_one()
    assert body == {"title": "Oceans", "assignedMusicians": ["@ana", "@luis"]}


def test_delete_removes_document(sqlite_store: SqlAlchemyDocumentStore) -> None:
    async def run() -> int:
        document_id = await sqlite_store.insert(Collection.NOTICES, {"title": "Retreat"})
        await sqlite_store.delete(Collection.NOTICES, document_id)
        return len(await sqlite_store.fetch(Collection.NOTICES))

    assert asyncio.run(run()) == 0


def test_missing_documents_raise_not_found(sqlite_store: SqlAlchemyDocumentStore) -> None:
    with pytest.raises(DocumentNotFoundError):
        asyncio.run(sqlite_store.update(Collection.ACCOUNTS, "missing", {"name": "x"}))
    with pytest.raises(DocumentNotFoundError):
        asyncio.run(sqlite_store.delete(Collection.ACCOUNTS, "missing"))


def test_listeners_receive_snapshots_after_writes(sqlite_store: SqlAlchemyDocumentStore) -> None:
    received: list[int] = []

    def listener(snapshot: Snapshot) -> None:
        received.append(len(snapshot))

    unsubscribe = sqlite_store.subscribe(Collection.EVENTS, listener)
    asyncio.run(sqlite_store.insert(Collection.EVENTS, {"title": "Rehearsal"}))
    unsubscribe()
    asyncio.run(sqlite_store.insert(Collection.EVENTS, {"title": "Service"}))

    assert received == [0, 1]


def test_committed_write_survives_failed_listener_refresh(
    sqlite_store: SqlAlchemyDocumentStore,
    sqlite_engine: Engine,
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    received: list[int] = []
    document_id = asyncio.run(sqlite_store.insert(Collection.SONGS, {"title": "Oceans"}))
    sqlite_store.subscribe(Collection.SONGS, lambda snapshot: received.append(len(snapshot)))

    def broken_snapshot(collection: Collection) -> list[Document]:
        raise StoreError(f"Could not read {collection.value}: database is locked")

    monkeypatch.setattr(sqlite_store, "snapshot", broken_snapshot)
    with caplog.at_level("WARNING", logger="rosterkeep.adapters.sqlalchemy.store"):
        outcome = asyncio.run(
            attempt_update(sqlite_store, Collection.SONGS, document_id, {"key": "B"})
        )

    assert outcome.status is WriteStatus.APPLIED
    assert received == [1]
    assert "Skipping songs listener update" in caplog.text
    with sqlite_engine.connect() as connection:
        body = connection.execute(
            select(documents_table.c.body).where(documents_table.c.document_id == document_id)
        ).scalar_one()
    assert body == {"title": "Oceans", "key": "B"}
