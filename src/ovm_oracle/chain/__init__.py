"""L1/L2 chain access: connections, contract resolution and proof lookup."""

from ovm_oracle.chain.connector import ChainConnection, ChainConnector
from ovm_oracle.chain.proofs import StateBatchProofSource
from ovm_oracle.chain.registry import ContractRegistryResolver

__all__ = [
    "ChainConnection", "ChainConnector",
    "ContractRegistryResolver",
    "StateBatchProofSource",
]
