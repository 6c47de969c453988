"""Document store persisted through SQLAlchemy Core."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError

from rosterkeep.adapters.broadcast import SnapshotBroadcaster
from rosterkeep.adapters.memory import generate_document_id
from rosterkeep.config.storage import get_storage_config
from rosterkeep.domain.ports.store import Document, DocumentNotFoundError, StoreError

from .mappings import create_all_tables, documents_table

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy.engine import Connection, Engine

    from rosterkeep.domain.ports.store import Collection, SnapshotListener, Unsubscribe

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SqlAlchemyDocumentStore:
    """Store collections as JSON documents in a single ``documents`` table.

    Listeners are notified in-process after each committed write, so only writers
    sharing this store instance are observed.

    The async methods run their queries synchronously and block the event loop
    for the duration of each statement. The store targets a local SQLite file.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._broadcaster = SnapshotBroadcaster()

    @classmethod
    def from_uri(cls, database_uri: str | None = None) -> SqlAlchemyDocumentStore:
        uri = database_uri or get_storage_config().database_uri()
        engine = create_engine(uri, future=True)
        create_all_tables(engine)
        log.debug("Opened document store at %s", engine.url.render_as_string(hide_password=True))
        return cls(engine)

    def dispose(self) -> None:
        self.engine.dispose()

    def snapshot(self, collection: Collection) -> list[Document]:
        stmt = (
            select(
                documents_table.c.document_id,
                documents_table.c.sequence,
                documents_table.c.body,
            )
            .where(documents_table.c.collection == collection.value)
            .order_by(documents_table.c.sequence)
        )
        try:
            with self.engine.connect() as connection:
                rows = connection.execute(stmt).all()
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not read {collection.value}: {exc}") from exc
        return [
            Document(id=row.document_id, sequence=row.sequence, fields=row.body) for row in rows
        ]

    def subscribe(self, collection: Collection, on_change: SnapshotListener) -> Unsubscribe:
        unsubscribe = self._broadcaster.add(collection, on_change)
        on_change(self.snapshot(collection))
        return unsubscribe

    async def fetch(self, collection: Collection) -> list[Document]:
        return self.snapshot(collection)

    async def insert(self, collection: Collection, fields: Mapping[str, object]) -> str:
        document_id = generate_document_id()
        now = _utcnow()
        stmt = insert(documents_table).values(
            collection=collection.value,
            document_id=document_id,
            body=dict(fields),
            created_at=now,
            updated_at=now,
        )
        try:
            with self.engine.begin() as connection:
                connection.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not insert into {collection.value}: {exc}") from exc
        self._notify(collection)
        return document_id

    async def update(
        self, collection: Collection, document_id: str, fields: Mapping[str, object]
    ) -> None:
        try:
            with self.engine.begin() as connection:
                current = self._load_body(connection, collection, document_id)
                connection.execute(
                    update(documents_table)
                    .where(documents_table.c.collection == collection.value)
                    .where(documents_table.c.document_id == document_id)
                    .values(body={**current, **fields}, updated_at=_utcnow())
                )
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not update {collection.value}/{document_id}: {exc}") from exc
        self._notify(collection)

    async def delete(self, collection: Collection, document_id: str) -> None:
        stmt = (
            delete(documents_table)
            .where(documents_table.c.collection == collection.value)
            .where(documents_table.c.document_id == document_id)
        )
        try:
            with self.engine.begin() as connection:
                deleted = connection.execute(stmt).rowcount
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not delete {collection.value}/{document_id}: {exc}") from exc
        if not deleted:
            raise DocumentNotFoundError(collection, document_id)
        self._notify(collection)

    def _load_body(
        self, connection: Connection, collection: Collection, document_id: str
    ) -> dict[str, object]:
        stmt = (
            select(documents_table.c.body)
            .where(documents_table.c.collection == collection.value)
            .where(documents_table.c.document_id == document_id)
        )
        body = connection.execute(stmt).scalar_one_or_none()
        if body is None:
            raise DocumentNotFoundError(collection, document_id)
        return dict(body)

    def _notify(self, collection: Collection) -> None:
        # Runs after the commit: a failed re-read must not fail the write itself.
        if not self._broadcaster.has_listeners(collection):
            return
        try:
            documents = self.snapshot(collection)
        except StoreError as exc:
            log.warning("Skipping %s listener update: %s", collection.value, exc)
            return
        self._broadcaster.publish(collection, documents)


if TYPE_CHECKING:
    from rosterkeep.domain.ports.store import DocumentStore

    _store_check: DocumentStore = SqlAlchemyDocumentStore.from_uri()
