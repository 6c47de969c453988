"""Duplicate collapsing for accounts and roster members.

Policy: walk a snapshot oldest first and keep the first record seen for each
normalized key; every later record with the same key is deleted from the store.
Records without a key (missing handle or name) never count as duplicates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from rosterkeep.domain.identity import normalize_handle, normalize_name
from rosterkeep.domain.ports.store import Collection

from .outcome import WriteOutcome, attempt_delete

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from rosterkeep.domain.model import Account, Record, RosterMember
    from rosterkeep.domain.ports.store import DocumentStore

log = getLogger(__name__)

type KeyFunction[TRecord: Record] = Callable[[TRecord], str | None]


@dataclass(frozen=True, slots=True)
class Duplicate:
    """A record slated for deletion and the earlier record that supersedes it."""

    record_id: str
    kept_id: str
    key: str


@dataclass(slots=True)
class CollapseResult:
    collection: Collection
    duplicates: list[Duplicate] = field(default_factory=list[Duplicate])
    outcomes: list[WriteOutcome] = field(default_factory=list[WriteOutcome])

    @property
    def removed(self) -> list[str]:
        return [outcome.document_id for outcome in self.outcomes if outcome.applied]


def find_duplicates[TRecord: Record](
    records: Iterable[TRecord], *, key: KeyFunction[TRecord]
) -> list[Duplicate]:
    """Return every record whose key was already seen earlier in sequence order."""

    first_seen: dict[str, str] = {}
    duplicates: list[Duplicate] = []
    for record in sorted(records, key=lambda item: item.sequence):
        record_key = key(record)
        if record_key is None:
            continue
        kept_id = first_seen.get(record_key)
        if kept_id is None:
            first_seen[record_key] = record.id
            continue
        if kept_id == record.id:
            continue
        duplicates.append(Duplicate(record_id=record.id, kept_id=kept_id, key=record_key))
    return duplicates


async def collapse_duplicates[TRecord: Record](
    store: DocumentStore,
    collection: Collection,
    records: Sequence[TRecord],
    *,
    key: KeyFunction[TRecord],
) -> CollapseResult:
    """Delete later duplicates one at a time; failed deletes do not stop the walk."""

    result = CollapseResult(collection=collection)
    result.duplicates = find_duplicates(records, key=key)
    for duplicate in result.duplicates:
        log.info(
            "Removing duplicate %s record %s (key=%r, kept=%s)",
            collection.value,
            duplicate.record_id,
            duplicate.key,
            duplicate.kept_id,
        )
        result.outcomes.append(await attempt_delete(store, collection, duplicate.record_id))
    return result


def account_key(account: Account) -> str | None:
    return normalize_handle(account.handle)


def roster_member_key(member: RosterMember) -> str | None:
    return normalize_name(member.display_name)


async def collapse_accounts(store: DocumentStore, accounts: Sequence[Account]) -> CollapseResult:
    return await collapse_duplicates(store, Collection.ACCOUNTS, accounts, key=account_key)


async def collapse_roster_members(
    store: DocumentStore, members: Sequence[RosterMember]
) -> CollapseResult:
    return await collapse_duplicates(
        store, Collection.ROSTER_MEMBERS, members, key=roster_member_key
    )
