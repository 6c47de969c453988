"""Team records as they appear in store snapshots.

Records are immutable views over one snapshot. Reconciliation never edits them in
place; it issues writes against the store and waits for the next snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import (
    EventType,
    MemberStatus,
    NoticeCategory,
    NotificationKind,
    RoleTag,
    SongCategory,
)


@dataclass(frozen=True, slots=True, kw_only=True)
class Record:
    id: str
    sequence: int = 0


@dataclass(frozen=True, slots=True, kw_only=True)
class Account(Record):
    """Login identity. ``handle`` is unique modulo case and a leading ``@``."""

    display_name: str | None
    handle: str | None
    password_secret: str | None = None
    role: RoleTag = RoleTag.MUSICIAN
    email: str | None = None
    instrument: str | None = None
    avatar: str | None = None
    push_token: str | None = None

    @property
    def is_leader(self) -> bool:
        return self.role is RoleTag.LEADER


@dataclass(frozen=True, slots=True, kw_only=True)
class RosterMember(Record):
    """Public team entry paired with an Account by handle (or, legacy, by name)."""

    display_name: str | None
    handle: str | None = None
    role_label: str = ""
    status: MemberStatus = MemberStatus.ACTIVE
    instrument: str | None = None
    avatar: str | None = None
    confirmed: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class Song(Record):
    title: str
    artist: str | None = None
    key: str | None = None
    category: SongCategory = SongCategory.GENERAL
    # Mixed representation while migrating: handles and legacy member record ids.
    assigned_identifiers: tuple[str, ...] = field(default_factory=tuple)
    # The stored list as read, non-string entries included; rewrites start from it.
    assignment_entries: tuple[object, ...] = field(default_factory=tuple)
    notes: str | None = None
    reference_url: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Notice(Record):
    title: str
    content: str = ""
    date: str = ""
    author: str | None = None
    category: NoticeCategory = NoticeCategory.GENERAL
    pinned: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class Event(Record):
    title: str
    date: str = ""
    time: str = ""
    type: EventType = EventType.OTHER
    notes: str | None = None
    location: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Notification(Record):
    title: str
    message: str
    timestamp: str
    kind: NotificationKind
    read: bool = False
