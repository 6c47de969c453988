from __future__ import annotations

from rosterkeep.domain.ports.store import Collection, Document
from rosterkeep.domain.reconciliation import AppState, ReadinessGate
from tests.helpers.clock import FakeClock


def _account_document(document_id: str, sequence: int) -> Document:
    return Document(id=document_id, sequence=sequence, fields={"username": f"@{document_id}"})


def test_apply_snapshot_orders_by_sequence_and_replaces_previous() -> None:
    state = AppState()

    state.apply_snapshot(
        Collection.ACCOUNTS, [_account_document("b", 2), _account_document("a", 1)]
    )
    assert [account.id for account in state.accounts] == ["a", "b"]

    state.apply_snapshot(Collection.ACCOUNTS, [_account_document("c", 3)])
    assert [account.id for account in state.accounts] == ["c"]
    assert state.loaded == {Collection.ACCOUNTS}


def test_gate_is_loading_until_timeout_without_accounts() -> None:
    clock = FakeClock()
    state = AppState(clock=clock)
    gate = ReadinessGate(initial_load_timeout_seconds=5.0)

    assert gate.is_loading(state)
    assert not gate.is_open(state)

    clock.advance(5.0)

    assert not gate.is_loading(state)
    # An empty account collection never opens the gate, however long we wait.
    assert not gate.is_open(state)


def test_gate_opens_as_soon_as_accounts_arrive() -> None:
    state = AppState(clock=FakeClock())
    gate = ReadinessGate()

    state.apply_snapshot(Collection.ACCOUNTS, [_account_document("a", 1)])

    assert not gate.is_loading(state)
    assert gate.is_open(state)
