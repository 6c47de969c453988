from __future__ import annotations

from rosterkeep.domain.model import (
    EventType,
    MemberStatus,
    NotificationKind,
    RoleTag,
    SongCategory,
    account_from_document,
    account_to_fields,
    event_from_document,
    notice_from_document,
    notification_from_document,
    roster_member_from_document,
    song_from_document,
)
from rosterkeep.domain.ports.store import Document


def test_account_translation_reads_storage_fields() -> None:
    document = Document(
        id="a1",
        sequence=4,
        fields={
            "name": " Ana ",
            "username": "@ana",
            "password": " keep spaces ",
            "role": "leader",
            "pushToken": "token-1",
        },
    )

    account = account_from_document(document)

    assert account.sequence == 4
    assert account.display_name == "Ana"
    assert account.handle == "@ana"
    assert account.password_secret == " keep spaces "
    assert account.role is RoleTag.LEADER
    assert account.is_leader
    assert account.push_token == "token-1"


def test_account_translation_tolerates_missing_fields() -> None:
    account = account_from_document(Document(id="a1", sequence=1, fields={}))

    assert account.display_name is None
    assert account.handle is None
    assert account.password_secret is None
    assert account.role is RoleTag.MUSICIAN


def test_account_to_fields_drops_unset_values() -> None:
    account = account_from_document(
        Document(id="a1", sequence=1, fields={"name": "Ana", "username": "@ana"})
    )

    assert account_to_fields(account) == {"name": "Ana", "username": "@ana", "role": "Musician"}


def test_legacy_spanish_labels_are_accepted() -> None:
    member = roster_member_from_document(
        Document(id="m1", sequence=1, fields={"name": "Ana", "status": "Descanso"})
    )
    song = song_from_document(
        Document(id="s1", sequence=1, fields={"title": "Way Maker", "category": "culto"})
    )
    event = event_from_document(
        Document(id="e1", sequence=1, fields={"title": "Ensayo", "type": "Ensayo"})
    )

    assert member.status is MemberStatus.RESTING
    assert song.category is SongCategory.SERVICE
    assert event.type is EventType.REHEARSAL


def test_unknown_labels_fall_back_to_defaults() -> None:
    member = roster_member_from_document(
        Document(id="m1", sequence=1, fields={"name": "Ana", "status": "on tour"})
    )

    assert member.status is MemberStatus.ACTIVE


def test_song_assignments_keep_order_and_skip_nulls() -> None:
    song = song_from_document(
        Document(
            id="s1",
            sequence=1,
            fields={"title": "Oceans", "assignedMusicians": ["@ana", None, "luis"]},
        )
    )

    assert song.assigned_identifiers == ("@ana", "luis")
    assert song.assignment_entries == ("@ana", None, "luis")


def test_song_without_assignment_list() -> None:
    song = song_from_document(
        Document(id="s1", sequence=1, fields={"title": "Oceans", "assignedMusicians": "@ana"})
    )

    assert song.assigned_identifiers == ()
    assert song.assignment_entries == ()


def test_flags_accept_strings_and_booleans() -> None:
    notice = notice_from_document(
        Document(id="n1", sequence=1, fields={"title": "Retreat", "isPinned": "true"})
    )
    notification = notification_from_document(
        Document(
            id="x1",
            sequence=1,
            fields={"title": "New Music", "message": "m", "type": "song", "isRead": True},
        )
    )

    assert notice.pinned
    assert notification.read
    assert notification.kind is NotificationKind.SONG
