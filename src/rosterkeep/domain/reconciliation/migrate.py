"""Backfills for records written before handles existed.

Two independent rules, both idempotent:

- roster members without a handle receive the handle of the account whose
  display name matches theirs
- song assignments holding a legacy roster member record id are rewritten to
  that member's handle, keeping list order and every other entry unchanged
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from rosterkeep.domain.identity import (
    DisplayName,
    LegacyRecordId,
    classify_assignment,
    match_identifier,
)
from rosterkeep.domain.ports.store import Collection

from .outcome import WriteOutcome, attempt_update

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from rosterkeep.domain.model import Account, RosterMember, Song

    from .collapse import Duplicate
    from rosterkeep.domain.ports.store import DocumentStore

log = getLogger(__name__)

HANDLE_FIELD = "username"
ASSIGNMENTS_FIELD = "assignedMusicians"


@dataclass(frozen=True, slots=True)
class HandleBackfill:
    member_id: str
    display_name: str
    handle: str


@dataclass(frozen=True, slots=True)
class AssignmentRewrite:
    song_id: str
    title: str
    before: tuple[object, ...]
    after: tuple[object, ...]
    unresolved: tuple[str, ...] = ()


def plan_handle_backfills(
    members: Iterable[RosterMember], accounts: Sequence[Account]
) -> list[HandleBackfill]:
    plans: list[HandleBackfill] = []
    for member in members:
        if member.handle or not member.display_name:
            continue
        match = match_identifier(DisplayName(member.display_name), accounts=accounts, members=())
        if match is None or match.account is None or not match.account.handle:
            continue
        plans.append(
            HandleBackfill(
                member_id=member.id,
                display_name=member.display_name,
                handle=match.account.handle,
            )
        )
    return plans


def superseded_member_handles(
    duplicates: Iterable[Duplicate],
    members: Sequence[RosterMember],
    accounts: Sequence[Account],
) -> dict[str, str]:
    """Map deleted duplicate member ids to the handle their kept record answers to.

    ``members`` is the roster as read before the collapse. The kept record's
    own handle wins, then the handle it is being backfilled with, then the
    duplicate's own handle.
    """

    by_id = {member.id: member for member in members}
    backfilled = {
        plan.member_id: plan.handle for plan in plan_handle_backfills(members, accounts)
    }
    handles: dict[str, str] = {}
    for duplicate in duplicates:
        kept = by_id.get(duplicate.kept_id)
        superseded = by_id.get(duplicate.record_id)
        handle = (
            (kept.handle if kept is not None else None)
            or backfilled.get(duplicate.kept_id)
            or (superseded.handle if superseded is not None else None)
        )
        if handle:
            handles[duplicate.record_id] = handle
    return handles


def plan_assignment_rewrite(
    song: Song,
    members: Sequence[RosterMember],
    *,
    aliases: Mapping[str, str] | None = None,
) -> AssignmentRewrite | None:
    """Return the rewritten assignment list, or ``None`` when nothing converts.

    ``aliases`` maps record ids that no longer belong to a member, such as
    deleted duplicates, to the handle they stand for.
    """

    converted: list[object] = []
    unresolved: list[str] = []
    changed = False
    for raw in song.assignment_entries:
        if not isinstance(raw, str):
            converted.append(raw)
            continue
        identifier = classify_assignment(raw)
        if not isinstance(identifier, LegacyRecordId):
            converted.append(raw)
            continue
        match = match_identifier(identifier, accounts=(), members=members)
        handle = match.member.handle if match is not None and match.member is not None else None
        if not handle and aliases:
            handle = aliases.get(raw)
        if not handle:
            unresolved.append(raw)
            converted.append(raw)
            continue
        converted.append(handle)
        changed = True
    if not changed:
        return None
    return AssignmentRewrite(
        song_id=song.id,
        title=song.title,
        before=song.assignment_entries,
        after=tuple(converted),
        unresolved=tuple(unresolved),
    )


def plan_assignment_rewrites(
    songs: Iterable[Song],
    members: Sequence[RosterMember],
    *,
    aliases: Mapping[str, str] | None = None,
) -> list[AssignmentRewrite]:
    plans: list[AssignmentRewrite] = []
    for song in songs:
        rewrite = plan_assignment_rewrite(song, members, aliases=aliases)
        if rewrite is not None:
            plans.append(rewrite)
    return plans


async def backfill_roster_handles(
    store: DocumentStore,
    members: Sequence[RosterMember],
    accounts: Sequence[Account],
) -> list[WriteOutcome]:
    outcomes: list[WriteOutcome] = []
    for plan in plan_handle_backfills(members, accounts):
        log.info("Backfilling handle %s for roster member %r", plan.handle, plan.display_name)
        outcomes.append(
            await attempt_update(
                store, Collection.ROSTER_MEMBERS, plan.member_id, {HANDLE_FIELD: plan.handle}
            )
        )
    return outcomes


async def canonicalize_song_assignments(
    store: DocumentStore,
    songs: Sequence[Song],
    members: Sequence[RosterMember],
    *,
    aliases: Mapping[str, str] | None = None,
) -> list[WriteOutcome]:
    outcomes: list[WriteOutcome] = []
    for plan in plan_assignment_rewrites(songs, members, aliases=aliases):
        if plan.unresolved:
            log.info(
                "Song %r keeps unresolved assignments: %s", plan.title, ", ".join(plan.unresolved)
            )
        log.info("Migrating song assignments for %r", plan.title)
        outcomes.append(
            await attempt_update(
                store, Collection.SONGS, plan.song_id, {ASSIGNMENTS_FIELD: list(plan.after)}
            )
        )
    return outcomes
