"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class RoleTag(StrEnum):
    LEADER = "Leader"
    MUSICIAN = "Musician"
    ADMIN = "Admin"


class MemberStatus(StrEnum):
    ACTIVE = "Active"
    RESTING = "Resting"
    PENDING = "Pending"


class SongCategory(StrEnum):
    REHEARSAL = "Rehearsal"
    SERVICE = "Service"
    GENERAL = "General"


class EventType(StrEnum):
    REHEARSAL = "Rehearsal"
    SERVICE = "Service"
    ACTIVITY = "Activity"
    OTHER = "Other"


class NoticeCategory(StrEnum):
    LEADERSHIP = "Leadership"
    MUSIC_TEAM = "Music Team"
    COMMUNITY = "Community"
    GENERAL = "General"


class NotificationKind(StrEnum):
    SONG = "song"
    NOTICE = "notice"
    EVENT = "event"


# Labels written by earlier, Spanish-only releases of the team app.
LEGACY_LABELS: dict[type[StrEnum], dict[str, StrEnum]] = {
    MemberStatus: {
        "activo": MemberStatus.ACTIVE,
        "descanso": MemberStatus.RESTING,
        "pendiente": MemberStatus.PENDING,
    },
    SongCategory: {
        "ensayo": SongCategory.REHEARSAL,
        "culto": SongCategory.SERVICE,
        "repertorio": SongCategory.GENERAL,
    },
    EventType: {
        "ensayo": EventType.REHEARSAL,
        "culto": EventType.SERVICE,
        "actividad": EventType.ACTIVITY,
        "otro": EventType.OTHER,
    },
}
