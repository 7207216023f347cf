"""Contract registry resolver - looks up OVM contracts in Lib_AddressManager."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from web3 import AsyncWeb3

from ovm_oracle.chain.abis import ABIS, ADDRESS_MANAGER, RESOLVED_CONTRACTS
from ovm_oracle.chain.connector import ChainConnection
from ovm_oracle.errors import ContractResolutionError

log = logging.getLogger(__name__)

ZERO_ADDRESS = "0x" + "0" * 40


class ContractRegistryResolver:
    """Resolves a fixed, ordered list of named contracts from the registry.

    Resolution stops at the first failure; there is no per-contract retry.
    """

    def __init__(
        self,
        registry_address: str,
        connection: ChainConnection,
        names: Sequence[str] = RESOLVED_CONTRACTS,
    ) -> None:
        self._connection = connection
        self._names = tuple(names)
        self._registry_address = AsyncWeb3.to_checksum_address(registry_address)
        self._registry = self._bind(ADDRESS_MANAGER, self._registry_address)

    @property
    def registry(self) -> Any:
        return self._registry

    def _bind(self, name: str, address: str) -> Any:
        return self._connection.w3.eth.contract(address=address, abi=ABIS[name])

    async def resolve(self) -> dict[str, Any]:
        """Return a name -> contract binding mapping in resolution order."""
        log.info("Connected to %s at %s", ADDRESS_MANAGER, self._registry_address)

        contracts: dict[str, Any] = {}
        for name in self._names:
            log.info("Connecting to %s...", name)
            try:
                address = await self._registry.functions.getAddress(name).call()
            except Exception as exc:
                raise ContractResolutionError(name, str(exc)) from exc

            if not address or int(address, 16) == 0:
                raise ContractResolutionError(name, "address is not set in the registry")

            address = AsyncWeb3.to_checksum_address(address)
            contracts[name] = self._bind(name, address)
            log.info("Connected to %s at %s", name, address)

        log.info("Connected to all contracts.")
        return contracts
