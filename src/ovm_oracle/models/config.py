"""Configuration models for the oracle."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# Lib_AddressManager on the original deployment
DEFAULT_ADDRESS_MANAGER = "0x100Dd3b414Df5BbA2B542864fF94aF8024aFdf3a"


class SinkKind(str, Enum):
    """Where delivered proofs are written."""

    HTTP = "http"  # POST to a JSON store
    SQLITE = "sqlite"  # local upsert table


class PolicyKind(str, Enum):
    """Pacing strategy between poll ticks."""

    FIXED = "fixed"
    BACKOFF = "backoff"


@dataclass
class SinkConfig:
    """Downstream store configuration."""

    kind: SinkKind = SinkKind.HTTP
    url: str = "http://127.0.0.1:3000"
    path: str = "proofs"
    timeout: int = 10  # seconds
    db_path: str = "~/.ovm_oracle/proofs.db"


@dataclass
class OracleConfig:
    """Complete oracle configuration."""

    # Oracle loop
    poll_interval: int = 5000  # milliseconds
    safety_lag: int = 100  # L1 blocks
    refresh_ceiling: bool = True
    policy: PolicyKind = PolicyKind.FIXED
    max_backoff: int = 60_000  # milliseconds
    log_level: str = "info"

    # L1
    l1_rpc_url: str = "http://127.0.0.1:8545"
    l1_wallet_key: str = ""  # loaded from env var OVM_ORACLE_L1_WALLET_KEY
    l1_start_offset: int = 0  # first L1 block scanned for state batches
    address_manager: str = DEFAULT_ADDRESS_MANAGER
    log_chunk_size: int = 2000  # blocks per eth_getLogs request

    # L2
    l2_rpc_url: str = "http://127.0.0.1:8546"

    # Bootstrap
    connect_attempts: int = 10
    connect_retry_delay: float = 1.0  # seconds

    # Downstream store
    sink: SinkConfig = field(default_factory=SinkConfig)

    @property
    def poll_interval_seconds(self) -> float:
        return self.poll_interval / 1000
