"""Pacing between poll ticks."""

from __future__ import annotations

import pytest

from ovm_oracle.models.config import PolicyKind
from ovm_oracle.models.records import TickOutcome
from ovm_oracle.policy import BackoffPolicy, FixedIntervalPolicy, make_policy

from tests.conftest import make_test_config


def test_fixed_policy_ignores_outcome():
    policy = FixedIntervalPolicy(5.0)
    assert policy.next_delay(None) == 5.0
    for outcome in TickOutcome:
        assert policy.next_delay(outcome) == 5.0


def test_fixed_policy_rejects_negative_interval():
    with pytest.raises(ValueError):
        FixedIntervalPolicy(-1)


def test_backoff_doubles_on_consecutive_faults_and_caps():
    policy = BackoffPolicy(1.0, 5.0)
    delays = [policy.next_delay(TickOutcome.LOOKUP_FAULT) for _ in range(4)]
    assert delays == [2.0, 4.0, 5.0, 5.0]


def test_backoff_resets_after_non_fault():
    policy = BackoffPolicy(1.0, 60.0)
    policy.next_delay(TickOutcome.DELIVERY_FAULT)
    policy.next_delay(TickOutcome.LOOKUP_FAULT)

    assert policy.next_delay(TickOutcome.NOT_YET_AVAILABLE) == 1.0
    assert policy.next_delay(TickOutcome.LOOKUP_FAULT) == 2.0
    assert policy.next_delay(TickOutcome.DELIVERED) == 1.0


def test_backoff_first_tick_uses_base_interval():
    assert BackoffPolicy(2.0, 10.0).next_delay(None) == 2.0


def test_backoff_rejects_cap_below_interval():
    with pytest.raises(ValueError):
        BackoffPolicy(10.0, 5.0)


def test_make_policy_from_config():
    fixed = make_policy(make_test_config(poll_interval=250))
    assert isinstance(fixed, FixedIntervalPolicy)
    assert fixed.next_delay(None) == 0.25

    backoff = make_policy(
        make_test_config(poll_interval=1000, policy=PolicyKind.BACKOFF, max_backoff=4000),
    )
    assert isinstance(backoff, BackoffPolicy)
    assert [backoff.next_delay(TickOutcome.LOOKUP_FAULT) for _ in range(3)] == [2.0, 4.0, 4.0]
