"""Roster services: registration, login, profile sync and member removal.

Every service works against the latest ``AppState`` and writes through the
store; the store's subscription brings the result back into the state.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final

from rosterkeep.domain.identity import (
    account_for_member,
    member_for_account,
    normalize_handle,
    normalize_name,
    prefixed_handle,
    same_handle,
)
from rosterkeep.domain.model import (
    Account,
    RoleTag,
    RosterMember,
    Song,
    account_to_fields,
    roster_member_to_fields,
)
from rosterkeep.domain.ports.store import Collection
from rosterkeep.domain.reconciliation.outcome import (
    WriteOutcome,
    attempt_delete,
    attempt_update,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from rosterkeep.domain.ports.store import DocumentStore
    from rosterkeep.domain.reconciliation.state import AppState

log = getLogger(__name__)

LEGACY_DEFAULT_PASSWORD: Final[str] = "password123"
AVATAR_URL_TEMPLATE: Final[str] = "https://picsum.photos/seed/{seed}/100/100"
ROLE_LABELS: Final[dict[RoleTag, str]] = {
    RoleTag.LEADER: "Leader",
    RoleTag.MUSICIAN: "Musician",
    RoleTag.ADMIN: "Admin",
}
# Normalized fragments of role labels that bulk removal must never touch.
PROTECTED_ROLE_MARKERS: Final[tuple[str, ...]] = ("lider", "leader", "president", "vice")


class RosterError(RuntimeError):
    """Base class for roster service failures a caller can act on."""


class RegistrationError(RosterError):
    """Raised when registration data is incomplete."""


class HandleTakenError(RegistrationError):
    def __init__(self, handle: str) -> None:
        super().__init__(f"Handle {handle!r} is already in use")
        self.handle = handle


class InvalidCredentialsError(RosterError):
    def __init__(self) -> None:
        super().__init__("Invalid credentials: use your @handle and password")


@dataclass(frozen=True, slots=True, kw_only=True)
class RegistrationRequest:
    display_name: str
    handle: str
    password: str
    role: RoleTag = RoleTag.MUSICIAN
    instrument: str | None = None


@dataclass(frozen=True, slots=True)
class Registration:
    account: Account
    member_id: str


@dataclass(frozen=True, slots=True, kw_only=True)
class ProfileChanges:
    display_name: str | None = None
    instrument: str | None = None
    avatar: str | None = None
    email: str | None = None
    password: str | None = None
    push_token: str | None = None


def _utcnow() -> datetime:
    return datetime.now(UTC)


def handle_in_use(handle: str, accounts: Iterable[Account]) -> bool:
    return any(same_handle(account.handle, handle) for account in accounts)


def is_protected_member(member: RosterMember) -> bool:
    role = normalize_name(member.role_label) or ""
    return any(marker in role for marker in PROTECTED_ROLE_MARKERS)


async def register_account(
    store: DocumentStore,
    state: AppState,
    request: RegistrationRequest,
    *,
    now: datetime | None = None,
) -> Registration:
    """Create an account and its roster entry; the handle must be unused."""

    display_name = request.display_name.strip()
    bare_handle = normalize_handle(request.handle)
    if not display_name or bare_handle is None or not request.password:
        raise RegistrationError("Name, handle and password are required")
    if handle_in_use(request.handle, state.accounts):
        raise HandleTakenError(request.handle)

    handle = prefixed_handle(request.handle)
    avatar = AVATAR_URL_TEMPLATE.format(seed=handle.removeprefix("@"))
    timestamp = (now or _utcnow()).isoformat()
    account = Account(
        id="",
        display_name=display_name,
        handle=handle,
        password_secret=request.password,
        role=request.role,
        instrument=request.instrument,
        avatar=avatar,
    )
    account_id = await store.insert(
        Collection.ACCOUNTS, {**account_to_fields(account), "timestamp": timestamp}
    )
    member = RosterMember(
        id="",
        display_name=display_name,
        handle=handle,
        role_label=ROLE_LABELS[request.role],
        instrument=request.instrument,
        avatar=avatar,
    )
    member_id = await store.insert(
        Collection.ROSTER_MEMBERS, {**roster_member_to_fields(member), "timestamp": timestamp}
    )
    log.info("Registered %s (account=%s, member=%s)", handle, account_id, member_id)
    return Registration(account=replace(account, id=account_id), member_id=member_id)


def authenticate(state: AppState, login: str, password: str) -> Account:
    """Find the account for ``login`` (handle or e-mail) with a matching password.

    Passwords are stored and compared in plain text.
    """

    search = login.strip().lower()
    for account in state.accounts:
        by_handle = same_handle(account.handle, search)
        by_email = account.email is not None and account.email.lower() == search
        if not (by_handle or by_email):
            continue
        expected = account.password_secret or LEGACY_DEFAULT_PASSWORD
        if password == expected:
            return account
    raise InvalidCredentialsError


async def update_profile(
    store: DocumentStore,
    state: AppState,
    account: Account,
    changes: ProfileChanges,
) -> list[WriteOutcome]:
    """Update the account, then mirror the public fields onto its roster entry."""

    updated = Account(
        id=account.id,
        sequence=account.sequence,
        display_name=changes.display_name or account.display_name,
        handle=account.handle,
        password_secret=changes.password or account.password_secret,
        role=account.role,
        email=changes.email or account.email,
        instrument=changes.instrument or account.instrument,
        avatar=changes.avatar or account.avatar,
        push_token=changes.push_token or account.push_token,
    )
    account_fields = account_to_fields(updated)
    account_fields["timestamp"] = _utcnow().isoformat()
    outcomes = [await attempt_update(store, Collection.ACCOUNTS, account.id, account_fields)]

    # Pair using the identity as stored before this edit.
    member = member_for_account(account, state.members)
    if member is None:
        log.info("No roster entry paired with %s; profile sync skipped", account.handle)
        return outcomes
    member_fields: Mapping[str, object] = {
        name: value
        for name, value in {
            "name": updated.display_name,
            "instrument": updated.instrument,
            "avatar": updated.avatar,
        }.items()
        if value is not None
    }
    outcomes.append(
        await attempt_update(store, Collection.ROSTER_MEMBERS, member.id, member_fields)
    )
    return outcomes


async def delete_account(
    store: DocumentStore, state: AppState, account: Account
) -> list[WriteOutcome]:
    outcomes = [await attempt_delete(store, Collection.ACCOUNTS, account.id)]
    member = member_for_account(account, state.members)
    if member is not None:
        outcomes.append(await attempt_delete(store, Collection.ROSTER_MEMBERS, member.id))
    return outcomes


async def remove_member(
    store: DocumentStore,
    state: AppState,
    actor: Account,
    member: RosterMember,
) -> bool:
    """Remove a roster member and its account; leadership roles are protected."""

    if not actor.is_leader:
        log.info("%s may not remove roster members", actor.handle)
        return False
    if is_protected_member(member):
        log.info("Refusing to remove protected roster member %r", member.display_name)
        return False

    removal = await attempt_delete(store, Collection.ROSTER_MEMBERS, member.id)
    account = account_for_member(member, state.accounts)
    if account is not None:
        await attempt_delete(store, Collection.ACCOUNTS, account.id)
    return removal.applied


async def confirm_participation(
    store: DocumentStore,
    state: AppState,
    account: Account,
    *,
    confirmed: bool,
) -> WriteOutcome | None:
    member = member_for_account(account, state.members)
    if member is None:
        return None
    outcome = await attempt_update(
        store, Collection.ROSTER_MEMBERS, member.id, {"isConfirmed": confirmed}
    )
    if outcome.applied:
        log.info("Participation of %r set to %s", member.display_name, confirmed)
    return outcome


def assigned_songs(
    account: Account, member: RosterMember | None, songs: Iterable[Song]
) -> list[Song]:
    """Songs assigned to this person under any identifier representation."""

    identifiers = {
        value for value in (account.handle, account.display_name) if value is not None
    }
    if member is not None:
        identifiers.add(member.id)
    return [
        song
        for song in songs
        if any(identifier in identifiers for identifier in song.assigned_identifiers)
    ]
