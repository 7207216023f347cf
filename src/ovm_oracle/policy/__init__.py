"""Pacing policies for the polling engine."""

from ovm_oracle.models.config import OracleConfig, PolicyKind
from ovm_oracle.policy.interval import BackoffPolicy, FixedIntervalPolicy


def make_policy(cfg: OracleConfig) -> FixedIntervalPolicy | BackoffPolicy:
    """Build the pacing policy selected in the configuration."""
    if cfg.policy is PolicyKind.BACKOFF:
        return BackoffPolicy(cfg.poll_interval_seconds, cfg.max_backoff / 1000)
    return FixedIntervalPolicy(cfg.poll_interval_seconds)


__all__ = ["BackoffPolicy", "FixedIntervalPolicy", "make_policy"]
