"""Reconciliation defaults."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float

DEFAULT_INITIAL_LOAD_TIMEOUT_SECONDS = 5.0


@dataclass(frozen=True, slots=True)
class ReconcileConfig:
    initial_load_timeout_seconds: float = DEFAULT_INITIAL_LOAD_TIMEOUT_SECONDS


def get_reconcile_config() -> ReconcileConfig:
    timeout = env_float(
        "ROSTERKEEP_LOAD_TIMEOUT",
        DEFAULT_INITIAL_LOAD_TIMEOUT_SECONDS,
        minimum=0.0,
    )
    return ReconcileConfig(initial_load_timeout_seconds=timeout)
