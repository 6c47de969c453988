"""Domain model for the team roster."""

from __future__ import annotations

from .enums import (
    EventType,
    MemberStatus,
    NoticeCategory,
    NotificationKind,
    RoleTag,
    SongCategory,
)
from .records import Account, Event, Notice, Notification, Record, RosterMember, Song
from .translate import (
    account_from_document,
    account_to_fields,
    event_from_document,
    notice_from_document,
    notification_from_document,
    notification_to_fields,
    roster_member_from_document,
    roster_member_to_fields,
    song_from_document,
)

__all__ = [
    "Account",
    "Event",
    "EventType",
    "MemberStatus",
    "Notice",
    "NoticeCategory",
    "Notification",
    "NotificationKind",
    "Record",
    "RoleTag",
    "RosterMember",
    "Song",
    "SongCategory",
    "account_from_document",
    "account_to_fields",
    "event_from_document",
    "notice_from_document",
    "notification_from_document",
    "notification_to_fields",
    "roster_member_from_document",
    "roster_member_to_fields",
    "song_from_document",
]
