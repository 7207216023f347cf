"""PollPolicy protocol - decides the delay before the next poll tick."""

from __future__ import annotations

from typing import Protocol

from ovm_oracle.models.records import TickOutcome


class PollPolicy(Protocol):
    """Pacing strategy for the polling engine."""

    def next_delay(self, outcome: TickOutcome | None) -> float:
        """Seconds to wait before the next tick. outcome is None before the first tick."""
        ...
