"""Identity matching across accounts, roster members and song assignments.

Identifiers arrive as plain strings in three shapes:

- a handle (``@ana``, ``ana``, ``ANA`` all name the same identity)
- a display name (compared without case, accents or surrounding whitespace)
- a legacy store record id of a roster member (old song assignments)

``classify_assignment`` is the single place that guesses the shape of a raw song
assignment. Everything downstream works on the tagged ``Identifier`` values.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from enum import StrEnum
from functools import singledispatch
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rosterkeep.domain.model import Account, RosterMember

HANDLE_PREFIX: Final[str] = "@"
# Store-generated ids are 20 characters; human handles are expected to be shorter.
LEGACY_ID_MIN_LENGTH: Final[int] = 16


def normalize_handle(value: str | None) -> str | None:
    """Lower-case ``value`` and drop a single leading ``@``; blank becomes ``None``."""

    if value is None:
        return None
    text = value.strip().lower()
    if text.startswith(HANDLE_PREFIX):
        text = text[len(HANDLE_PREFIX) :]
    return text or None


def normalize_name(value: str | None) -> str | None:
    """Lower-case ``value`` and strip diacritics and surrounding whitespace."""

    if value is None:
        return None
    decomposed = unicodedata.normalize("NFD", value.lower())
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return stripped.strip() or None


def prefixed_handle(value: str) -> str:
    """Return ``value`` in its stored ``@handle`` form."""

    text = value.strip()
    return text if text.startswith(HANDLE_PREFIX) else f"{HANDLE_PREFIX}{text}"


def same_handle(left: str | None, right: str | None) -> bool:
    normalized = normalize_handle(left)
    return normalized is not None and normalized == normalize_handle(right)


def same_name(left: str | None, right: str | None) -> bool:
    normalized = normalize_name(left)
    return normalized is not None and normalized == normalize_name(right)


@dataclass(frozen=True, slots=True)
class Handle:
    value: str


@dataclass(frozen=True, slots=True)
class LegacyRecordId:
    value: str


@dataclass(frozen=True, slots=True)
class DisplayName:
    value: str


type Identifier = Handle | LegacyRecordId | DisplayName


def is_legacy_record_id(raw: str) -> bool:
    """Return whether a song assignment still holds a roster member record id.

    Known weak heuristic kept for compatibility with stored data: anything longer
    than 15 characters without the ``@`` prefix is read as a record id, so a long
    handle stored without its prefix is misclassified.
    """

    return not raw.startswith(HANDLE_PREFIX) and len(raw) >= LEGACY_ID_MIN_LENGTH


def classify_assignment(raw: str) -> Handle | LegacyRecordId:
    if is_legacy_record_id(raw):
        return LegacyRecordId(raw)
    return Handle(raw)


class MatchKind(StrEnum):
    HANDLE = "handle"
    NAME = "name"
    RECORD_ID = "record_id"


@dataclass(frozen=True, slots=True)
class IdentityMatch:
    """Canonical identity: the Account/RosterMember pair an identifier points at."""

    matched_by: MatchKind
    account: Account | None = None
    member: RosterMember | None = None

    @property
    def handle(self) -> str | None:
        if self.account is not None and self.account.handle:
            return self.account.handle
        if self.member is not None and self.member.handle:
            return self.member.handle
        return None


def _first_by_handle[TRecord: (Account, RosterMember)](
    records: Iterable[TRecord], handle: str | None
) -> TRecord | None:
    return next((record for record in records if same_handle(record.handle, handle)), None)


def _first_by_name[TRecord: (Account, RosterMember)](
    records: Iterable[TRecord], name: str | None
) -> TRecord | None:
    return next((record for record in records if same_name(record.display_name, name)), None)


def account_for_member(member: RosterMember, accounts: Iterable[Account]) -> Account | None:
    """Pair a roster member with its account: handle first, then display name."""

    candidates = tuple(accounts)
    return _first_by_handle(candidates, member.handle) or _first_by_name(
        candidates, member.display_name
    )


def member_for_account(account: Account, members: Iterable[RosterMember]) -> RosterMember | None:
    """Pair an account with its roster entry: handle, then display name, then raw id."""

    candidates = tuple(members)
    return (
        _first_by_handle(candidates, account.handle)
        or _first_by_name(candidates, account.display_name)
        or next((member for member in candidates if member.id == account.id), None)
    )


@singledispatch
def match_identifier(
    identifier: object,
    *,
    accounts: Iterable[Account],
    members: Iterable[RosterMember],
) -> IdentityMatch | None:
    raise TypeError(f"Unsupported identifier: {identifier!r}")


@match_identifier.register(Handle)
def _(
    identifier: Handle,
    *,
    accounts: Iterable[Account],
    members: Iterable[RosterMember],
) -> IdentityMatch | None:
    account_candidates = tuple(accounts)
    member_candidates = tuple(members)
    account = _first_by_handle(account_candidates, identifier.value)
    member = _first_by_handle(member_candidates, identifier.value)
    if account is None and member is None:
        return None
    if member is None and account is not None:
        member = _first_by_name(member_candidates, account.display_name)
    if account is None and member is not None:
        account = _first_by_name(account_candidates, member.display_name)
    return IdentityMatch(matched_by=MatchKind.HANDLE, account=account, member=member)


@match_identifier.register(DisplayName)
def _(
    identifier: DisplayName,
    *,
    accounts: Iterable[Account],
    members: Iterable[RosterMember],
) -> IdentityMatch | None:
    account = _first_by_name(accounts, identifier.value)
    member = _first_by_name(members, identifier.value)
    if account is None and member is None:
        return None
    return IdentityMatch(matched_by=MatchKind.NAME, account=account, member=member)


@match_identifier.register(LegacyRecordId)
def _(
    identifier: LegacyRecordId,
    *,
    accounts: Iterable[Account],
    members: Iterable[RosterMember],
) -> IdentityMatch | None:
    member = next((member for member in members if member.id == identifier.value), None)
    if member is None:
        return None
    return IdentityMatch(
        matched_by=MatchKind.RECORD_ID,
        account=account_for_member(member, accounts),
        member=member,
    )


def resolve_identity(
    raw: str,
    *,
    accounts: Iterable[Account],
    members: Iterable[RosterMember],
) -> IdentityMatch | None:
    """Resolve a loosely-typed identifier string; first match wins.

    Precedence: handle, then display name, then raw roster member record id.
    """

    account_candidates = tuple(accounts)
    member_candidates = tuple(members)
    for identifier in (Handle(raw), DisplayName(raw), LegacyRecordId(raw)):
        found = match_identifier(
            identifier, accounts=account_candidates, members=member_candidates
        )
        if found is not None:
            return found
    return None
