"""Data models for the ovm_oracle relay."""

from ovm_oracle.models.config import (
    DEFAULT_ADDRESS_MANAGER,
    OracleConfig,
    PolicyKind,
    SinkConfig,
    SinkKind,
)
from ovm_oracle.models.proofs import InclusionProof, StateBatchHeader, TransactionBatchProof
from ovm_oracle.models.records import (
    Chain,
    DeliveryResult,
    EngineState,
    Liveness,
    OracleStats,
    TickOutcome,
)

__all__ = [
    "DEFAULT_ADDRESS_MANAGER", "OracleConfig", "PolicyKind", "SinkConfig", "SinkKind",
    "InclusionProof", "StateBatchHeader", "TransactionBatchProof",
    "Chain", "DeliveryResult", "EngineState", "Liveness", "OracleStats", "TickOutcome",
]
