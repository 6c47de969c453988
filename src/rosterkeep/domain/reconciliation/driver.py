"""Reconciliation passes and the snapshot-driven driver.

A pass runs four phases in a fixed order, each relying on the previous ones:

1. collapse duplicate accounts
2. collapse duplicate roster members
3. backfill roster member handles
4. canonicalize song assignments

The driver subscribes to the store and re-runs a full pass whenever a snapshot
arrives. Passes are level-triggered: they look only at the latest state, never
at what changed.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from rosterkeep.domain.ports.store import Collection

from .collapse import collapse_accounts, collapse_roster_members
from .migrate import (
    backfill_roster_handles,
    canonicalize_song_assignments,
    superseded_member_handles,
)
from .outcome import WriteOutcome, WriteStatus
from .state import AppState, ReadinessGate

if TYPE_CHECKING:
    from collections.abc import Callable

    from rosterkeep.domain.ports.store import DocumentStore, Snapshot, Unsubscribe

log = getLogger(__name__)


class Phase(StrEnum):
    COLLAPSE_ACCOUNTS = "collapse_accounts"
    COLLAPSE_MEMBERS = "collapse_members"
    BACKFILL_HANDLES = "backfill_handles"
    CANONICALIZE_ASSIGNMENTS = "canonicalize_assignments"


@dataclass(slots=True)
class ReconciliationReport:
    skipped: bool = False
    reason: str | None = None
    phases: dict[Phase, list[WriteOutcome]] = field(
        default_factory=dict[Phase, list[WriteOutcome]]
    )

    @property
    def outcomes(self) -> list[WriteOutcome]:
        return [outcome for outcomes in self.phases.values() for outcome in outcomes]

    @property
    def applied(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.applied)

    @property
    def failures(self) -> list[WriteOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status is WriteStatus.FAILED]


async def reconcile(
    store: DocumentStore,
    state: AppState,
    *,
    gate: ReadinessGate | None = None,
) -> ReconciliationReport:
    """Run one gated pass over the current ``state``."""

    active_gate = gate or ReadinessGate()
    if active_gate.is_loading(state):
        log.debug("Skipping reconciliation: initial load still in progress")
        return ReconciliationReport(skipped=True, reason="loading")
    if not active_gate.is_open(state):
        log.debug("Skipping reconciliation: no accounts loaded")
        return ReconciliationReport(skipped=True, reason="no-accounts")

    # Work on the references captured here; newer snapshots trigger another pass.
    accounts = state.accounts
    members = state.members
    songs = state.songs
    report = ReconciliationReport()

    account_result = await collapse_accounts(store, accounts)
    report.phases[Phase.COLLAPSE_ACCOUNTS] = account_result.outcomes
    superseded_accounts = {duplicate.record_id for duplicate in account_result.duplicates}
    accounts = tuple(account for account in accounts if account.id not in superseded_accounts)

    member_result = await collapse_roster_members(store, members)
    report.phases[Phase.COLLAPSE_MEMBERS] = member_result.outcomes
    superseded_members = {duplicate.record_id for duplicate in member_result.duplicates}
    # Songs may still point at a deleted duplicate; its id resolves through the kept record.
    aliases = superseded_member_handles(member_result.duplicates, members, accounts)
    members = tuple(member for member in members if member.id not in superseded_members)

    if members:
        report.phases[Phase.BACKFILL_HANDLES] = await backfill_roster_handles(
            store, members, accounts
        )
        if songs:
            report.phases[Phase.CANONICALIZE_ASSIGNMENTS] = await canonicalize_song_assignments(
                store, songs, members, aliases=aliases
            )

    if report.outcomes:
        log.info(
            "Reconciliation pass finished: writes=%s, applied=%s, failed=%s",
            len(report.outcomes),
            report.applied,
            len(report.failures),
        )
    return report


@dataclass(slots=True)
class ReconciliationDriver:
    """Feed store snapshots into ``AppState`` and reconcile after each batch."""

    store: DocumentStore
    state: AppState = field(default_factory=AppState)
    gate: ReadinessGate = field(default_factory=ReadinessGate)
    collections: tuple[Collection, ...] = tuple(Collection)
    on_report: Callable[[ReconciliationReport], None] | None = None
    _pending: asyncio.Queue[tuple[Collection, Snapshot]] = field(
        default_factory=asyncio.Queue, init=False, repr=False
    )
    _unsubscribes: list[Unsubscribe] = field(default_factory=list["Unsubscribe"], init=False)

    def start(self) -> None:
        if self._unsubscribes:
            return
        for collection in self.collections:
            self._unsubscribes.append(
                self.store.subscribe(collection, self._listener_for(collection))
            )

    def close(self) -> None:
        while self._unsubscribes:
            self._unsubscribes.pop()()

    def _listener_for(self, collection: Collection) -> Callable[[Snapshot], None]:
        def listener(snapshot: Snapshot) -> None:
            self._pending.put_nowait((collection, tuple(snapshot)))

        return listener

    def _apply_pending(self) -> bool:
        applied = False
        while not self._pending.empty():
            collection, snapshot = self._pending.get_nowait()
            self.state.apply_snapshot(collection, snapshot)
            applied = True
        return applied

    async def process_pending(self) -> ReconciliationReport | None:
        """Apply every queued snapshot and run one pass; ``None`` when nothing was queued."""

        if not self._apply_pending():
            return None
        report = await reconcile(self.store, self.state, gate=self.gate)
        if self.on_report is not None:
            self.on_report(report)
        return report

    async def settle(self, *, max_passes: int = 10) -> list[ReconciliationReport]:
        """Reconcile until the store stops producing new snapshots."""

        reports: list[ReconciliationReport] = []
        for _ in range(max_passes):
            report = await self.process_pending()
            if report is None:
                break
            reports.append(report)
        return reports

    async def run(self, stop: asyncio.Event) -> None:
        """Reconcile on every snapshot until ``stop`` is set."""

        self.start()
        stop_waiter = asyncio.ensure_future(stop.wait())
        try:
            while not stop.is_set():
                snapshot_waiter = asyncio.ensure_future(self._pending.get())
                done, _ = await asyncio.wait(
                    {snapshot_waiter, stop_waiter}, return_when=asyncio.FIRST_COMPLETED
                )
                if snapshot_waiter not in done:
                    snapshot_waiter.cancel()
                    break
                collection, snapshot = snapshot_waiter.result()
                self.state.apply_snapshot(collection, snapshot)
                self._apply_pending()
                report = await reconcile(self.store, self.state, gate=self.gate)
                if self.on_report is not None:
                    self.on_report(report)
        finally:
            stop_waiter.cancel()
            self.close()
