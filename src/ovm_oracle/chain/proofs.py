"""State batch proof source - builds inclusion proofs from OVM_StateCommitmentChain."""

from __future__ import annotations

import logging
from typing import Any

from web3 import AsyncWeb3

from ovm_oracle.chain.abis import STATE_COMMITMENT_CHAIN
from ovm_oracle.chain.connector import ChainConnection
from ovm_oracle.chain.merkle import merkle_proof, merkle_root
from ovm_oracle.errors import ProofLookupError, ProofNotAvailable
from ovm_oracle.models.proofs import InclusionProof, StateBatchHeader, TransactionBatchProof
from ovm_oracle.models.records import Chain

log = logging.getLogger(__name__)

DEFAULT_LOG_CHUNK_SIZE = 2000


def _header_from_log(entry: Any) -> StateBatchHeader:
    args = entry["args"]
    return StateBatchHeader(
        batch_index=int(args["_batchIndex"]),
        batch_root=bytes(args["_batchRoot"]),
        batch_size=int(args["_batchSize"]),
        prev_total_elements=int(args["_prevTotalElements"]),
        extra_data=bytes(args["_extraData"]),
        l1_block_number=int(entry["blockNumber"]),
        l1_tx_hash=AsyncWeb3.to_hex(entry["transactionHash"]),
    )


class StateBatchProofSource:
    """Locates the state batch holding an L2 index and proves its inclusion.

    StateBatchAppended events are scanned in chunks from start_block up to the
    ceiling handed in by the caller. Scanned headers are kept, so later
    lookups only fetch the blocks above the highest block scanned so far.
    """

    def __init__(
        self,
        l1: ChainConnection,
        l2: ChainConnection,
        contracts: dict[str, Any],
        start_block: int = 0,
        log_chunk_size: int = DEFAULT_LOG_CHUNK_SIZE,
    ) -> None:
        if log_chunk_size < 1:
            raise ValueError("log_chunk_size must be at least 1")
        self._l1 = l1
        self._l2 = l2
        self._scc = contracts[STATE_COMMITMENT_CHAIN]
        self._chunk = log_chunk_size
        self._scanned_to = start_block - 1
        self._batches: list[StateBatchHeader] = []
        self._elements: dict[int, list[bytes]] = {}

    @property
    def scanned_to(self) -> int:
        return self._scanned_to

    async def current_height(self, chain: Chain) -> int:
        conn = self._l1 if chain is Chain.L1 else self._l2
        return await conn.block_number()

    async def get_batch_proof(
        self, l2_index: int, l1_height_ceiling: int,
    ) -> TransactionBatchProof:
        if l2_index < 0:
            raise ValueError(f"l2_index must be non-negative, got {l2_index}")

        try:
            await self._scan_batches(l1_height_ceiling)
        except Exception as exc:
            raise ProofLookupError(f"state batch scan failed: {exc}") from exc

        header = self._find_batch(l2_index, l1_height_ceiling)
        if header is None:
            raise ProofNotAvailable(
                f"no state batch for index {l2_index} at or below L1 block {l1_height_ceiling}"
            )

        try:
            elements = await self._batch_elements(header)
        except ProofLookupError:
            raise
        except Exception as exc:
            raise ProofLookupError(
                f"could not read batch {header.batch_index} from {header.l1_tx_hash}: {exc}"
            ) from exc

        if len(elements) != header.batch_size:
            raise ProofNotAvailable(
                f"batch {header.batch_index} has {len(elements)} of {header.batch_size} elements"
            )

        try:
            root = merkle_root(elements)
        except ValueError as exc:
            raise ProofLookupError(f"batch {header.batch_index}: {exc}") from exc
        if root != header.batch_root:
            raise ProofLookupError(
                f"batch {header.batch_index} root mismatch: "
                f"computed 0x{root.hex()}, committed 0x{header.batch_root.hex()}"
            )

        position = l2_index - header.prev_total_elements
        log.debug(
            "Built proof for index %d (batch %d, position %d)",
            l2_index, header.batch_index, position,
        )
        return TransactionBatchProof(
            index=l2_index,
            state_root=elements[position],
            batch_header=header,
            inclusion_proof=InclusionProof(
                index=position,
                siblings=merkle_proof(elements, position),
            ),
        )

    async def _scan_batches(self, ceiling: int) -> None:
        start = self._scanned_to + 1
        while start <= ceiling:
            end = min(start + self._chunk - 1, ceiling)
            entries = await self._scc.events.StateBatchAppended.get_logs(
                from_block=start, to_block=end,
            )
            for entry in entries:
                self._batches.append(_header_from_log(entry))
            if entries:
                log.info(
                    "Found %d state batches in L1 blocks %d-%d", len(entries), start, end,
                )
            self._scanned_to = end
            start = end + 1

    def _find_batch(self, l2_index: int, ceiling: int) -> StateBatchHeader | None:
        for header in reversed(self._batches):
            if header.l1_block_number > ceiling:
                continue
            if header.contains(l2_index):
                return header
        return None

    async def _batch_elements(self, header: StateBatchHeader) -> list[bytes]:
        cached = self._elements.get(header.batch_index)
        if cached is not None:
            return cached

        tx = await self._l1.w3.eth.get_transaction(header.l1_tx_hash)
        func, params = self._scc.decode_function_input(tx["input"])
        if func.fn_name != "appendStateBatch":
            raise ProofLookupError(
                f"transaction {header.l1_tx_hash} calls {func.fn_name}, not appendStateBatch"
            )

        elements = [bytes(e) for e in params["_batch"]]
        if len(elements) == header.batch_size:
            self._elements[header.batch_index] = elements
        return elements
