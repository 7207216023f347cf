"""Delivery sinks for completed proofs."""

from ovm_oracle.models.config import SinkConfig, SinkKind
from ovm_oracle.sink.http import HttpProofSink
from ovm_oracle.sink.sqlite import SQLiteProofStore


async def open_sink(cfg: SinkConfig) -> HttpProofSink | SQLiteProofStore:
    """Build and initialize the sink selected in the configuration."""
    if cfg.kind is SinkKind.SQLITE:
        store = SQLiteProofStore(cfg.db_path)
        await store.initialize()
        return store
    return HttpProofSink(cfg.url, cfg.path, cfg.timeout)


__all__ = ["HttpProofSink", "SQLiteProofStore", "open_sink"]
