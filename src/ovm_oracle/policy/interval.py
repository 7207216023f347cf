"""Poll pacing policies."""

from __future__ import annotations

from ovm_oracle.models.records import TickOutcome


class FixedIntervalPolicy:
    """Constant delay between ticks, whatever the previous outcome was."""

    def __init__(self, interval: float) -> None:
        if interval < 0:
            raise ValueError("interval must be non-negative")
        self._interval = interval

    def next_delay(self, outcome: TickOutcome | None) -> float:
        return self._interval


class BackoffPolicy:
    """Doubles the delay for each consecutive fault, capped at max_delay.

    A delivered proof or a routine not-yet-available result resets the delay
    to the base interval.
    """

    def __init__(self, interval: float, max_delay: float) -> None:
        if interval < 0 or max_delay < interval:
            raise ValueError("require 0 <= interval <= max_delay")
        self._interval = interval
        self._max_delay = max_delay
        self._faults = 0

    def next_delay(self, outcome: TickOutcome | None) -> float:
        if outcome is not None and outcome.is_fault:
            self._faults += 1
        else:
            self._faults = 0

        if self._faults == 0:
            return self._interval
        return min(self._interval * 2 ** self._faults, self._max_delay)
