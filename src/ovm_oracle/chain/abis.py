"""Minimal ABI fragments for the OVM contracts the oracle talks to."""

from __future__ import annotations

ADDRESS_MANAGER = "Lib_AddressManager"
STATE_COMMITMENT_CHAIN = "OVM_StateCommitmentChain"
CANONICAL_TRANSACTION_CHAIN = "OVM_CanonicalTransactionChain"
FRAUD_VERIFIER = "OVM_FraudVerifier"
EXECUTION_MANAGER = "OVM_ExecutionManager"

# Resolution order used at bootstrap
RESOLVED_CONTRACTS = (
    STATE_COMMITMENT_CHAIN,
    CANONICAL_TRANSACTION_CHAIN,
    FRAUD_VERIFIER,
    EXECUTION_MANAGER,
)

_GET_TOTAL_ELEMENTS = {
    "inputs": [],
    "name": "getTotalElements",
    "outputs": [{"internalType": "uint256", "name": "_totalElements", "type": "uint256"}],
    "stateMutability": "view",
    "type": "function",
}

ABIS: dict[str, list[dict]] = {
    ADDRESS_MANAGER: [
        {
            "inputs": [{"internalType": "string", "name": "_name", "type": "string"}],
            "name": "getAddress",
            "outputs": [{"internalType": "address", "name": "", "type": "address"}],
            "stateMutability": "view",
            "type": "function",
        },
    ],
    STATE_COMMITMENT_CHAIN: [
        {
            "anonymous": False,
            "inputs": [
                {"indexed": True, "internalType": "uint256", "name": "_batchIndex", "type": "uint256"},
                {"indexed": False, "internalType": "bytes32", "name": "_batchRoot", "type": "bytes32"},
                {"indexed": False, "internalType": "uint256", "name": "_batchSize", "type": "uint256"},
                {"indexed": False, "internalType": "uint256", "name": "_prevTotalElements", "type": "uint256"},
                {"indexed": False, "internalType": "bytes", "name": "_extraData", "type": "bytes"},
            ],
            "name": "StateBatchAppended",
            "type": "event",
        },
        {
            "inputs": [
                {"internalType": "bytes32[]", "name": "_batch", "type": "bytes32[]"},
                {"internalType": "uint256", "name": "_shouldStartAtElement", "type": "uint256"},
            ],
            "name": "appendStateBatch",
            "outputs": [],
            "stateMutability": "nonpayable",
            "type": "function",
        },
        _GET_TOTAL_ELEMENTS,
    ],
    CANONICAL_TRANSACTION_CHAIN: [_GET_TOTAL_ELEMENTS],
    FRAUD_VERIFIER: [
        {
            "inputs": [{"internalType": "bytes32", "name": "_preStateRoot", "type": "bytes32"}],
            "name": "getStateTransitioner",
            "outputs": [{"internalType": "address", "name": "", "type": "address"}],
            "stateMutability": "view",
            "type": "function",
        },
    ],
    EXECUTION_MANAGER: [
        {
            "inputs": [],
            "name": "ovmCHAINID",
            "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
            "stateMutability": "view",
            "type": "function",
        },
    ],
}
