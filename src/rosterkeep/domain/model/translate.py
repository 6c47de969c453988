"""Translate store documents to records and records to storage fields."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from .enums import (
    LEGACY_LABELS,
    EventType,
    MemberStatus,
    NoticeCategory,
    NotificationKind,
    RoleTag,
    SongCategory,
)
from .records import Account, Event, Notice, Notification, RosterMember, Song

if TYPE_CHECKING:
    from collections.abc import Mapping

    from rosterkeep.domain.ports.store import Document


def _text(fields: Mapping[str, object], name: str) -> str | None:
    value = fields.get(name)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _flag(fields: Mapping[str, object], name: str) -> bool:
    value = fields.get(name)
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return bool(value)


def _label[TEnum: StrEnum](enum_type: type[TEnum], raw: str | None, default: TEnum) -> TEnum:
    if raw is None:
        return default
    for member in enum_type:
        if member.value.lower() == raw.lower():
            return member
    legacy = LEGACY_LABELS.get(enum_type, {}).get(raw.lower())
    if isinstance(legacy, enum_type):
        return legacy
    return default


def _entries(fields: Mapping[str, object], name: str) -> tuple[object, ...]:
    value = fields.get(name)
    if not isinstance(value, list | tuple):
        return ()
    return tuple(value)  # pyright: ignore[reportUnknownVariableType, reportUnknownArgumentType]


def account_from_document(document: Document) -> Account:
    fields = document.fields
    password = fields.get("password")
    return Account(
        id=document.id,
        sequence=document.sequence,
        display_name=_text(fields, "name"),
        handle=_text(fields, "username"),
        password_secret=password if isinstance(password, str) else None,
        role=_label(RoleTag, _text(fields, "role"), RoleTag.MUSICIAN),
        email=_text(fields, "email"),
        instrument=_text(fields, "instrument"),
        avatar=_text(fields, "avatar"),
        push_token=_text(fields, "pushToken"),
    )


def roster_member_from_document(document: Document) -> RosterMember:
    fields = document.fields
    return RosterMember(
        id=document.id,
        sequence=document.sequence,
        display_name=_text(fields, "name"),
        handle=_text(fields, "username"),
        role_label=_text(fields, "role") or "",
        status=_label(MemberStatus, _text(fields, "status"), MemberStatus.ACTIVE),
        instrument=_text(fields, "instrument"),
        avatar=_text(fields, "avatar"),
        confirmed=_flag(fields, "isConfirmed"),
    )


def song_from_document(document: Document) -> Song:
    fields = document.fields
    entries = _entries(fields, "assignedMusicians")
    return Song(
        id=document.id,
        sequence=document.sequence,
        title=_text(fields, "title") or "",
        artist=_text(fields, "artist"),
        key=_text(fields, "key"),
        category=_label(SongCategory, _text(fields, "category"), SongCategory.GENERAL),
        assigned_identifiers=tuple(entry for entry in entries if isinstance(entry, str)),
        assignment_entries=entries,
        notes=_text(fields, "notes"),
        reference_url=_text(fields, "referenceUrl"),
    )


def notice_from_document(document: Document) -> Notice:
    fields = document.fields
    return Notice(
        id=document.id,
        sequence=document.sequence,
        title=_text(fields, "title") or "",
        content=_text(fields, "content") or "",
        date=_text(fields, "date") or "",
        author=_text(fields, "author"),
        category=_label(NoticeCategory, _text(fields, "category"), NoticeCategory.GENERAL),
        pinned=_flag(fields, "isPinned"),
    )


def event_from_document(document: Document) -> Event:
    fields = document.fields
    return Event(
        id=document.id,
        sequence=document.sequence,
        title=_text(fields, "title") or "",
        date=_text(fields, "date") or "",
        time=_text(fields, "time") or "",
        type=_label(EventType, _text(fields, "type"), EventType.OTHER),
        notes=_text(fields, "notes"),
        location=_text(fields, "location"),
    )


def notification_from_document(document: Document) -> Notification:
    fields = document.fields
    return Notification(
        id=document.id,
        sequence=document.sequence,
        title=_text(fields, "title") or "",
        message=_text(fields, "message") or "",
        timestamp=_text(fields, "timestamp") or "",
        kind=_label(NotificationKind, _text(fields, "type"), NotificationKind.NOTICE),
        read=_flag(fields, "isRead"),
    )


def _without_none(fields: dict[str, object]) -> dict[str, object]:
    return {name: value for name, value in fields.items() if value is not None}


def account_to_fields(account: Account) -> dict[str, object]:
    return _without_none(
        {
            "name": account.display_name,
            "username": account.handle,
            "password": account.password_secret,
            "role": account.role.value,
            "email": account.email,
            "instrument": account.instrument,
            "avatar": account.avatar,
            "pushToken": account.push_token,
        }
    )


def roster_member_to_fields(member: RosterMember) -> dict[str, object]:
    return _without_none(
        {
            "name": member.display_name,
            "username": member.handle,
            "role": member.role_label,
            "status": member.status.value,
            "instrument": member.instrument,
            "avatar": member.avatar,
            "isConfirmed": member.confirmed,
        }
    )


def notification_to_fields(notification: Notification) -> dict[str, object]:
    return {
        "title": notification.title,
        "message": notification.message,
        "timestamp": notification.timestamp,
        "type": notification.kind.value,
        "isRead": notification.read,
    }
