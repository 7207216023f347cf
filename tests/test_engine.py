"""Poll tick semantics: cursor advancement, retry policy and outcome classification."""

from __future__ import annotations

from ovm_oracle.errors import ProofLookupError, ProofNotAvailable
from ovm_oracle.models.records import Chain, EngineState, TickOutcome
from ovm_oracle.oracle import ProofOracle

from tests.conftest import make_test_config
from tests.mocks import MockProofSource


# ── Running entry ─────────────────────────────────────────────────


async def test_initial_cursor_is_l2_height_minus_one(oracle):
    """L2 height 100 → first index polled is 99."""
    assert oracle.state == EngineState.RUNNING
    assert oracle.next_index == 99


async def test_ceiling_is_latest_l1_minus_safety_lag(oracle):
    assert oracle.l1_height_ceiling == 900


async def test_initial_cursor_never_negative(test_config, mock_sink):
    o = ProofOracle(test_config, source=MockProofSource(l1_height=50, l2_height=0), sink=mock_sink)
    await o.bootstrap()
    await o._enter_running()
    assert o.next_index == 0
    assert o.l1_height_ceiling == 0


# ── Successful tick ───────────────────────────────────────────────


async def test_delivered_proof_carries_index_and_advances(oracle, mock_source, mock_sink):
    mock_source.make_available(99)

    outcome = await oracle._tick()

    assert outcome == TickOutcome.DELIVERED
    assert mock_sink.delivered == [99]
    assert mock_sink.payloads[0]["index"] == 99
    assert mock_sink.payloads[0]["id"] == 99
    assert oracle.next_index == 100
    assert oracle.stats.delivered == 1


async def test_lookup_uses_current_cursor_and_ceiling(oracle, mock_source):
    mock_source.make_available(99)
    await oracle._tick()
    assert mock_source.calls == [(99, 900)]


# ── Not available ─────────────────────────────────────────────────


async def test_not_available_retries_same_index(oracle, mock_source, mock_sink):
    outcome = await oracle._tick()
    assert outcome == TickOutcome.NOT_YET_AVAILABLE
    assert oracle.next_index == 99

    outcome = await oracle._tick()
    assert outcome == TickOutcome.NOT_YET_AVAILABLE
    assert [c[0] for c in mock_source.calls] == [99, 99]
    assert mock_sink.attempts == []
    assert oracle.stats.not_available == 2
    assert oracle.stats.consecutive_faults == 0


async def test_not_available_then_available(oracle, mock_source, mock_sink):
    await oracle._tick()
    mock_source.make_available(99)
    await oracle._tick()

    assert mock_sink.delivered == [99]
    assert oracle.next_index == 100


# ── Faults ────────────────────────────────────────────────────────


async def test_lookup_error_is_swallowed_and_retried(oracle, mock_source, mock_sink):
    mock_source.make_available(99)
    mock_source.fail_next(99, ProofLookupError("rpc timeout"))

    outcome = await oracle._tick()
    assert outcome == TickOutcome.LOOKUP_FAULT
    assert oracle.next_index == 99
    assert oracle.stats.lookup_faults == 1
    assert oracle.stats.consecutive_faults == 1

    outcome = await oracle._tick()
    assert outcome == TickOutcome.DELIVERED
    assert mock_sink.delivered == [99]
    assert oracle.stats.consecutive_faults == 0


async def test_unexpected_lookup_exception_counts_as_fault(oracle, mock_source):
    mock_source.fail_next(99, KeyError("boom"))

    outcome = await oracle._tick()

    assert outcome == TickOutcome.LOOKUP_FAULT
    assert oracle.next_index == 99


async def test_delivery_failure_does_not_advance(oracle, mock_source, mock_sink):
    mock_source.make_available(99)
    mock_sink.fail_count = 1

    outcome = await oracle._tick()
    assert outcome == TickOutcome.DELIVERY_FAULT
    assert oracle.next_index == 99
    assert oracle.stats.delivery_faults == 1

    # Proof is looked up again and re-delivered
    outcome = await oracle._tick()
    assert outcome == TickOutcome.DELIVERED
    assert mock_sink.attempts == [99, 99]
    assert [c[0] for c in mock_source.calls] == [99, 99]
    assert oracle.next_index == 100


async def test_delivery_exception_counts_as_delivery_fault(oracle, mock_source, mock_sink):
    mock_source.make_available(99)
    mock_sink.raise_next = RuntimeError("socket closed")

    outcome = await oracle._tick()

    assert outcome == TickOutcome.DELIVERY_FAULT
    assert oracle.next_index == 99


async def test_ceiling_refresh_failure_is_lookup_fault(oracle, mock_source):
    mock_source.make_available(99)
    mock_source.height_errors.append(ConnectionError("L1 down"))

    outcome = await oracle._tick()

    assert outcome == TickOutcome.LOOKUP_FAULT
    assert mock_source.calls == []
    assert oracle.next_index == 99


# ── Ceiling refresh ───────────────────────────────────────────────


async def test_ceiling_refreshed_each_tick(oracle, mock_source):
    await oracle._tick()
    mock_source.heights[Chain.L1] = 1050
    await oracle._tick()

    assert [c[1] for c in mock_source.calls] == [900, 950]


async def test_ceiling_captured_once_when_refresh_disabled(mock_source, mock_sink):
    o = ProofOracle(make_test_config(refresh_ceiling=False), source=mock_source, sink=mock_sink)
    await o.bootstrap()
    await o._enter_running()

    mock_source.heights[Chain.L1] = 5000
    await o._tick()

    assert mock_source.calls == [(99, 900)]


# ── Ordering properties ───────────────────────────────────────────


async def test_mixed_outcomes_deliver_in_order_without_gaps(oracle, mock_source, mock_sink):
    """Whatever the outcome sequence, delivered indices are consecutive and unique."""
    mock_source.make_available(99, 100, 101, 102)
    mock_source.fail_next(100, ProofNotAvailable("pending"))
    mock_source.fail_next(100, ProofLookupError("flaky"))
    mock_source.fail_next(102, ProofLookupError("flaky"))

    seen = [oracle.next_index]
    for i in range(12):
        if i == 5:
            mock_sink.fail_count = 1
        await oracle._tick()
        seen.append(oracle.next_index)

    assert mock_sink.delivered == [99, 100, 101, 102]
    assert all(b >= a for a, b in zip(seen, seen[1:]))
    assert oracle.next_index == 103


async def test_no_advance_past_unavailable_index(oracle, mock_source, mock_sink):
    """Index 100 never becomes available, so 101 is never looked up."""
    mock_source.make_available(99, 101, 102)

    for _ in range(5):
        await oracle._tick()

    assert mock_sink.delivered == [99]
    assert {c[0] for c in mock_source.calls} == {99, 100}
