"""Engine state and operation result types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Chain(str, Enum):
    L1 = "L1"
    L2 = "L2"


class Liveness(str, Enum):
    """Liveness state of a chain connection."""

    UNKNOWN = "unknown"
    CONNECTED = "connected"
    FAILED = "failed"


class EngineState(str, Enum):
    """Lifecycle of the polling engine."""

    BOOTSTRAPPING = "bootstrapping"
    RUNNING = "running"
    STOPPED = "stopped"
    FAILED = "failed"


class TickOutcome(str, Enum):
    """Result of one poll tick."""

    DELIVERED = "delivered"
    NOT_YET_AVAILABLE = "not_yet_available"
    LOOKUP_FAULT = "lookup_fault"
    DELIVERY_FAULT = "delivery_fault"

    @property
    def is_fault(self) -> bool:
        return self in (TickOutcome.LOOKUP_FAULT, TickOutcome.DELIVERY_FAULT)


@dataclass
class DeliveryResult:
    """Result of writing one proof to the downstream store."""

    success: bool
    index: int
    error: str | None = None
    duration_ms: int = 0


@dataclass
class OracleStats:
    """Counters kept by the polling engine."""

    ticks: int = 0
    delivered: int = 0
    not_available: int = 0
    lookup_faults: int = 0
    delivery_faults: int = 0
    consecutive_faults: int = 0

    def record(self, outcome: TickOutcome) -> None:
        self.ticks += 1
        if outcome is TickOutcome.DELIVERED:
            self.delivered += 1
        elif outcome is TickOutcome.NOT_YET_AVAILABLE:
            self.not_available += 1
        elif outcome is TickOutcome.LOOKUP_FAULT:
            self.lookup_faults += 1
        elif outcome is TickOutcome.DELIVERY_FAULT:
            self.delivery_faults += 1

        if outcome.is_fault:
            self.consecutive_faults += 1
        else:
            self.consecutive_faults = 0
