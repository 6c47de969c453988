"""Self-healing reconciliation of the team collections.

Duplicate accounts and roster members are collapsed, roster members gain the
handle of their account, and legacy song assignments move to handles. Every
write is best effort: failures are reported, never raised.
"""

from __future__ import annotations

from .collapse import (
    CollapseResult,
    Duplicate,
    collapse_accounts,
    collapse_duplicates,
    collapse_roster_members,
    find_duplicates,
)
from .driver import Phase, ReconciliationDriver, ReconciliationReport, reconcile
from .migrate import (
    AssignmentRewrite,
    HandleBackfill,
    backfill_roster_handles,
    canonicalize_song_assignments,
    plan_assignment_rewrite,
    plan_assignment_rewrites,
    plan_handle_backfills,
    superseded_member_handles,
)
from .outcome import WriteKind, WriteOutcome, WriteStatus, attempt_delete, attempt_update
from .state import AppState, ReadinessGate

__all__ = [
    "AppState",
    "AssignmentRewrite",
    "CollapseResult",
    "Duplicate",
    "HandleBackfill",
    "Phase",
    "ReadinessGate",
    "ReconciliationDriver",
    "ReconciliationReport",
    "WriteKind",
    "WriteOutcome",
    "WriteStatus",
    "attempt_delete",
    "attempt_update",
    "backfill_roster_handles",
    "canonicalize_song_assignments",
    "collapse_accounts",
    "collapse_duplicates",
    "collapse_roster_members",
    "find_duplicates",
    "plan_assignment_rewrite",
    "plan_assignment_rewrites",
    "plan_handle_backfills",
    "reconcile",
    "superseded_member_handles",
]
