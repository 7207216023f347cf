"""Merkle root and path computation matching OVM Lib_MerkleTree.

Rows with an odd number of nodes are padded with a per-depth default hash:
defaults[0] = keccak256(bytes32(0)), defaults[n + 1] = keccak256(defaults[n] ++ defaults[n]).
"""

from __future__ import annotations

from eth_utils import keccak

_MAX_DEPTH = 16


def _build_defaults(depth: int) -> list[bytes]:
    defaults = [keccak(b"\x00" * 32)]
    for _ in range(depth - 1):
        defaults.append(keccak(defaults[-1] + defaults[-1]))
    return defaults


DEFAULT_HASHES = _build_defaults(_MAX_DEPTH)


def _next_row(row: list[bytes], depth: int) -> list[bytes]:
    if len(row) % 2 == 1:
        row = row + [DEFAULT_HASHES[depth]]
    return [keccak(row[i] + row[i + 1]) for i in range(0, len(row), 2)]


def merkle_root(leaves: list[bytes]) -> bytes:
    """Root of a batch of 32-byte leaves."""
    if not leaves:
        raise ValueError("cannot compute the merkle root of an empty batch")
    if len(leaves) > 2 ** _MAX_DEPTH:
        raise ValueError(f"batch of {len(leaves)} elements exceeds the maximum tree depth")

    row = list(leaves)
    depth = 0
    while len(row) > 1:
        row = _next_row(row, depth)
        depth += 1
    return row[0]


def merkle_proof(leaves: list[bytes], index: int) -> list[bytes]:
    """Sibling hashes from leaf to root for the leaf at index."""
    if not 0 <= index < len(leaves):
        raise IndexError(f"leaf index {index} out of range for batch of {len(leaves)}")

    siblings: list[bytes] = []
    row = list(leaves)
    depth = 0
    while len(row) > 1:
        sibling = index ^ 1
        siblings.append(row[sibling] if sibling < len(row) else DEFAULT_HASHES[depth])
        row = _next_row(row, depth)
        index //= 2
        depth += 1
    return siblings


def fold_proof(leaf: bytes, index: int, siblings: list[bytes]) -> bytes:
    """Recompute the root from a leaf and its sibling path."""
    node = leaf
    for sibling in siblings:
        if index % 2 == 0:
            node = keccak(node + sibling)
        else:
            node = keccak(sibling + node)
        index //= 2
    return node
