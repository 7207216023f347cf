"""Proof models produced by the proof source and consumed by the sinks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _hex(value: bytes) -> str:
    return "0x" + value.hex()


@dataclass(frozen=True)
class StateBatchHeader:
    """A state batch as appended to OVM_StateCommitmentChain."""

    batch_index: int
    batch_root: bytes
    batch_size: int
    prev_total_elements: int
    extra_data: bytes
    l1_block_number: int  # block that committed the batch
    l1_tx_hash: str

    def contains(self, l2_index: int) -> bool:
        return self.prev_total_elements <= l2_index < self.prev_total_elements + self.batch_size

    def to_payload(self) -> dict[str, Any]:
        return {
            "batchIndex": self.batch_index,
            "batchRoot": _hex(self.batch_root),
            "batchSize": self.batch_size,
            "prevTotalElements": self.prev_total_elements,
            "extraData": _hex(self.extra_data),
        }


@dataclass(frozen=True)
class InclusionProof:
    """Merkle path of one element inside its batch."""

    index: int  # position within the batch
    siblings: list[bytes] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "siblings": [_hex(s) for s in self.siblings],
        }


@dataclass(frozen=True)
class TransactionBatchProof:
    """Inclusion proof for one L2 transaction index.

    The index is the key the downstream store upserts on.
    """

    index: int
    state_root: bytes
    batch_header: StateBatchHeader
    inclusion_proof: InclusionProof

    def to_payload(self) -> dict[str, Any]:
        """Render the JSON body sent to the downstream store."""
        return {
            "id": self.index,
            "index": self.index,
            "stateRoot": _hex(self.state_root),
            "stateRootBatchHeader": self.batch_header.to_payload(),
            "stateRootProof": self.inclusion_proof.to_payload(),
            "l1BlockNumber": self.batch_header.l1_block_number,
            "l1TransactionHash": self.batch_header.l1_tx_hash,
        }
