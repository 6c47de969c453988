"""Per-write results for best-effort store writes.

Reconciliation writes never raise: each attempt yields a ``WriteOutcome`` that
the caller logs and reports. A failed write is picked up again by the next pass
over a fresh snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from rosterkeep.domain.ports.store import DocumentNotFoundError, StoreError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Mapping

    from rosterkeep.domain.ports.store import Collection, DocumentStore

log = getLogger(__name__)


class WriteKind(StrEnum):
    DELETE = "delete"
    UPDATE = "update"


class WriteStatus(StrEnum):
    APPLIED = "applied"
    MISSING = "missing"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class WriteOutcome:
    kind: WriteKind
    collection: Collection
    document_id: str
    status: WriteStatus
    fields: Mapping[str, object] = field(default_factory=dict[str, object])
    error: str | None = None

    @property
    def applied(self) -> bool:
        return self.status is WriteStatus.APPLIED


async def _attempt(
    request: Awaitable[None],
    *,
    kind: WriteKind,
    collection: Collection,
    document_id: str,
    fields: Mapping[str, object],
) -> WriteOutcome:
    try:
        await request
    except DocumentNotFoundError as exc:
        log.debug("Skipped %s of %s/%s: %s", kind, collection.value, document_id, exc)
        return WriteOutcome(
            kind=kind,
            collection=collection,
            document_id=document_id,
            status=WriteStatus.MISSING,
            fields=fields,
            error=str(exc),
        )
    except StoreError as exc:
        log.warning("Failed %s of %s/%s: %s", kind, collection.value, document_id, exc)
        return WriteOutcome(
            kind=kind,
            collection=collection,
            document_id=document_id,
            status=WriteStatus.FAILED,
            fields=fields,
            error=str(exc),
        )
    return WriteOutcome(
        kind=kind,
        collection=collection,
        document_id=document_id,
        status=WriteStatus.APPLIED,
        fields=fields,
    )


async def attempt_delete(
    store: DocumentStore, collection: Collection, document_id: str
) -> WriteOutcome:
    return await _attempt(
        store.delete(collection, document_id),
        kind=WriteKind.DELETE,
        collection=collection,
        document_id=document_id,
        fields={},
    )


async def attempt_update(
    store: DocumentStore,
    collection: Collection,
    document_id: str,
    fields: Mapping[str, object],
) -> WriteOutcome:
    return await _attempt(
        store.update(collection, document_id, fields),
        kind=WriteKind.UPDATE,
        collection=collection,
        document_id=document_id,
        fields=dict(fields),
    )
