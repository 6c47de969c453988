"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from rosterkeep.adapters.memory import LogNotificationGateway
from rosterkeep.adapters.onesignal import OneSignalGateway
from rosterkeep.adapters.sqlalchemy import SqlAlchemyDocumentStore
from rosterkeep.config import ReconcileConfig, get_reconcile_config
from rosterkeep.domain.notifications import AnnouncementResult, announce
from rosterkeep.domain.ports.store import Collection
from rosterkeep.domain.reconciliation import (
    AppState,
    ReadinessGate,
    ReconciliationDriver,
    ReconciliationReport,
    reconcile,
)
from rosterkeep.domain.roster import Registration, RegistrationRequest, register_account

if TYPE_CHECKING:
    from collections.abc import Sequence

    from rosterkeep.domain.model import NotificationKind
    from rosterkeep.domain.ports.notifications import NotificationGateway
    from rosterkeep.domain.ports.store import DocumentStore

log = getLogger(__name__)


def build_store(database_uri: str | None = None) -> SqlAlchemyDocumentStore:
    return SqlAlchemyDocumentStore.from_uri(database_uri)


async def load_state(store: DocumentStore) -> AppState:
    """Fetch every collection once into a fresh ``AppState``."""

    state = AppState()
    for collection in Collection:
        state.apply_snapshot(collection, await store.fetch(collection))
    return state


async def reconcile_once(store: DocumentStore) -> ReconciliationReport:
    """Run a single reconciliation pass over freshly fetched snapshots."""

    state = await load_state(store)
    # Every collection has been fetched, so only the account check applies.
    report = await reconcile(store, state, gate=ReadinessGate(initial_load_timeout_seconds=0.0))
    if report.skipped:
        log.warning("Reconciliation skipped: %s", report.reason)
    return report


async def watch(
    store: DocumentStore,
    stop: asyncio.Event,
    *,
    config: ReconcileConfig | None = None,
) -> None:
    """Reconcile on every snapshot change until ``stop`` is set."""

    effective = config or get_reconcile_config()
    driver = ReconciliationDriver(
        store=store,
        gate=ReadinessGate(initial_load_timeout_seconds=effective.initial_load_timeout_seconds),
    )
    log.info(
        "Watching %s collections (initial load timeout %.1fs)",
        len(driver.collections),
        effective.initial_load_timeout_seconds,
    )
    await driver.run(stop)


async def register(store: DocumentStore, request: RegistrationRequest) -> Registration:
    state = await load_state(store)
    return await register_account(store, state, request)


def run_reconciliation(*, database_uri: str | None = None) -> ReconciliationReport:
    """Open the configured store and reconcile it once."""

    store = build_store(database_uri)
    try:
        report = asyncio.run(reconcile_once(store))
    finally:
        store.dispose()
    log.info(
        "Finished reconciliation: writes=%s, applied=%s, failed=%s",
        len(report.outcomes),
        report.applied,
        len(report.failures),
    )
    return report


def run_watch(
    *,
    database_uri: str | None = None,
    config: ReconcileConfig | None = None,
) -> None:
    store = build_store(database_uri)

    async def _watch_forever() -> None:
        await watch(store, asyncio.Event(), config=config)

    try:
        asyncio.run(_watch_forever())
    finally:
        store.dispose()


def create_member(
    request: RegistrationRequest, *, database_uri: str | None = None
) -> Registration:
    store = build_store(database_uri)
    try:
        registration = asyncio.run(register(store, request))
    finally:
        store.dispose()
    log.info("Created account %s (%s)", registration.account.id, registration.account.handle)
    return registration


def publish_announcement(
    *,
    leader_name: str,
    kind: NotificationKind,
    content_title: str,
    recipients: Sequence[str] | None = None,
    gateway: NotificationGateway | None = None,
    dry_run: bool = False,
    database_uri: str | None = None,
) -> AnnouncementResult:
    """Record and push a leader announcement through the configured provider."""

    effective_gateway = gateway or (LogNotificationGateway() if dry_run else OneSignalGateway())
    store = build_store(database_uri)
    try:
        result = asyncio.run(
            announce(
                store,
                effective_gateway,
                leader_name=leader_name,
                kind=kind,
                content_title=content_title,
                recipients=recipients,
            )
        )
    finally:
        store.dispose()
    log.info(
        "Announcement %r: recorded=%s, delivered=%s",
        result.message.title,
        result.notification_id is not None,
        result.delivered,
    )
    return result
