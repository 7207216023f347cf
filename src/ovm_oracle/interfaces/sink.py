"""ProofSink protocol - writes proofs to the downstream store."""

from __future__ import annotations

from typing import Protocol

from ovm_oracle.models.proofs import TransactionBatchProof
from ovm_oracle.models.records import DeliveryResult


class ProofSink(Protocol):
    """Writes one proof per call, keyed by its index. Never retries."""

    async def deliver(self, proof: TransactionBatchProof) -> DeliveryResult:
        ...

    async def close(self) -> None:
        ...
