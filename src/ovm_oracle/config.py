"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

from ovm_oracle.errors import ConfigError
from ovm_oracle.models.config import OracleConfig, PolicyKind, SinkConfig, SinkKind


def _bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _enum(cls, value: object, name: str):
    try:
        return cls(value)
    except ValueError:
        choices = ", ".join(m.value for m in cls)
        raise ConfigError(f"invalid {name} {value!r}, expected one of: {choices}") from None


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "OVM_ORACLE_",
) -> OracleConfig:
    """Load oracle configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (OVM_ORACLE_L1_WALLET_KEY, etc.)
        2. TOML config file
        3. Defaults from OracleConfig
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = OracleConfig()

    # ── Oracle section ─────────────────────────────────────
    oracle = raw.get("oracle", {})
    if v := oracle.get("poll_interval"):
        cfg.poll_interval = int(v)
    if (v := oracle.get("safety_lag")) is not None:
        cfg.safety_lag = int(v)
    if (v := oracle.get("refresh_ceiling")) is not None:
        cfg.refresh_ceiling = _bool(v)
    if v := oracle.get("policy"):
        cfg.policy = _enum(PolicyKind, v, "policy")
    if v := oracle.get("max_backoff"):
        cfg.max_backoff = int(v)
    if v := oracle.get("log_level"):
        cfg.log_level = str(v)

    # ── L1 section ─────────────────────────────────────────
    l1 = raw.get("l1", {})
    if v := l1.get("rpc_url"):
        cfg.l1_rpc_url = str(v)
    if v := l1.get("wallet_key"):
        cfg.l1_wallet_key = str(v)
    if (v := l1.get("start_offset")) is not None:
        cfg.l1_start_offset = int(v)
    if v := l1.get("address_manager"):
        cfg.address_manager = str(v)
    if v := l1.get("log_chunk_size"):
        cfg.log_chunk_size = int(v)

    # ── L2 section ─────────────────────────────────────────
    l2 = raw.get("l2", {})
    if v := l2.get("rpc_url"):
        cfg.l2_rpc_url = str(v)

    # ── Bootstrap section ──────────────────────────────────
    bootstrap = raw.get("bootstrap", {})
    if v := bootstrap.get("connect_attempts"):
        cfg.connect_attempts = int(v)
    if (v := bootstrap.get("connect_retry_delay")) is not None:
        cfg.connect_retry_delay = float(v)

    # ── Sink section ───────────────────────────────────────
    sink_raw = raw.get("sink", {})
    defaults = SinkConfig()
    cfg.sink = SinkConfig(
        kind=_enum(SinkKind, sink_raw.get("kind", defaults.kind.value), "sink kind"),
        url=str(sink_raw.get("url", defaults.url)),
        path=str(sink_raw.get("path", defaults.path)),
        timeout=int(sink_raw.get("timeout", defaults.timeout)),
        db_path=str(sink_raw.get("db_path", defaults.db_path)),
    )

    # ── Environment variable overrides (highest priority) ──
    if url := os.environ.get(f"{env_prefix}L1_RPC_URL"):
        cfg.l1_rpc_url = url
    if url := os.environ.get(f"{env_prefix}L2_RPC_URL"):
        cfg.l2_rpc_url = url
    if key := os.environ.get(f"{env_prefix}L1_WALLET_KEY"):
        cfg.l1_wallet_key = key
    if interval := os.environ.get(f"{env_prefix}POLLING_INTERVAL"):
        cfg.poll_interval = int(interval)
    if offset := os.environ.get(f"{env_prefix}L1_START_OFFSET"):
        cfg.l1_start_offset = int(offset)
    if manager := os.environ.get(f"{env_prefix}ADDRESS_MANAGER"):
        cfg.address_manager = manager
    if sink_url := os.environ.get(f"{env_prefix}SINK_URL"):
        cfg.sink.url = sink_url

    # Expand ~ in paths
    if cfg.sink.db_path != ":memory:":
        cfg.sink.db_path = str(Path(cfg.sink.db_path).expanduser())

    return cfg


def validate_config(cfg: OracleConfig) -> None:
    """Raise ConfigError if the configuration cannot start the oracle."""
    if not cfg.l1_wallet_key:
        raise ConfigError(
            "No L1 wallet key configured. "
            "Set OVM_ORACLE_L1_WALLET_KEY or wallet_key in the [l1] config section."
        )
    if cfg.poll_interval <= 0:
        raise ConfigError(f"poll_interval must be positive, got {cfg.poll_interval}")
    if cfg.safety_lag < 0:
        raise ConfigError(f"safety_lag must be non-negative, got {cfg.safety_lag}")
    if cfg.l1_start_offset < 0:
        raise ConfigError(f"l1 start_offset must be non-negative, got {cfg.l1_start_offset}")
    if cfg.connect_attempts < 1:
        raise ConfigError("connect_attempts must be at least 1")
    if cfg.policy is PolicyKind.BACKOFF and cfg.max_backoff < cfg.poll_interval:
        raise ConfigError(
            f"max_backoff ({cfg.max_backoff} ms) must not be below "
            f"poll_interval ({cfg.poll_interval} ms)"
        )
