"""ProofSource protocol - reads chain heights and builds batch inclusion proofs."""

from __future__ import annotations

from typing import Protocol

from ovm_oracle.models.proofs import TransactionBatchProof
from ovm_oracle.models.records import Chain


class ProofSource(Protocol):
    """Looks up the state batch proof for an L2 transaction index."""

    async def current_height(self, chain: Chain) -> int:
        """Latest block number observed on the given chain."""
        ...

    async def get_batch_proof(
        self, l2_index: int, l1_height_ceiling: int,
    ) -> TransactionBatchProof:
        """Build the proof for l2_index from batches committed at or below the ceiling.

        Raises ProofNotAvailable when the batch is not committed yet and
        ProofLookupError for any other fault.
        """
        ...
