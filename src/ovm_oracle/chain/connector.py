"""Chain connector - bounded-retry liveness check of a JSON-RPC endpoint."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from web3 import AsyncHTTPProvider, AsyncWeb3

from ovm_oracle.errors import ChainConnectionError
from ovm_oracle.models.records import Liveness

log = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 10
DEFAULT_RETRY_DELAY = 1.0  # seconds


def make_web3(rpc_url: str, timeout: int = 10) -> AsyncWeb3:
    """Build an async web3 client for a JSON-RPC endpoint."""
    return AsyncWeb3(AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))


@dataclass
class ChainConnection:
    """A chain endpoint that passed its liveness check."""

    name: str
    rpc_url: str
    w3: Any = field(repr=False)
    chain_id: int
    status: Liveness = Liveness.CONNECTED

    async def block_number(self) -> int:
        return await self.w3.eth.block_number

    async def close(self) -> None:
        """Close the provider session."""
        try:
            await self.w3.provider.disconnect()
        except Exception as exc:
            log.debug("Error closing %s provider: %s", self.name, exc)


class ChainConnector:
    """Connects to one chain, retrying the network-identity query.

    Each failed attempt sleeps retry_delay seconds before the next one. Once
    the attempt budget is spent the connector raises ChainConnectionError and
    never retries again.
    """

    def __init__(
        self,
        name: str,
        rpc_url: str,
        attempts: int = DEFAULT_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        w3: Any = None,
    ) -> None:
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        self._name = name
        self._rpc_url = rpc_url
        self._attempts = attempts
        self._retry_delay = retry_delay
        self._w3 = w3 if w3 is not None else make_web3(rpc_url)
        self.state = Liveness.UNKNOWN
        self.attempts_made = 0

    async def connect(self) -> ChainConnection:
        log.info("Trying to connect to the %s network...", self._name)

        for attempt in range(1, self._attempts + 1):
            self.attempts_made = attempt
            try:
                chain_id = await self._w3.eth.chain_id
            except Exception as exc:
                remaining = self._attempts - attempt
                if remaining == 0:
                    self.state = Liveness.FAILED
                    log.error("Unable to connect to the %s network: %s", self._name, exc)
                    raise ChainConnectionError(self._name, self._rpc_url, attempt) from exc
                log.info(
                    "Unable to connect to %s network (retry attempts remaining: %d): %s",
                    self._name, remaining, exc,
                )
                await asyncio.sleep(self._retry_delay)
                continue

            self.state = Liveness.CONNECTED
            log.info(
                "Successfully connected to the %s network (chain id %d).",
                self._name, chain_id,
            )
            return ChainConnection(
                name=self._name,
                rpc_url=self._rpc_url,
                w3=self._w3,
                chain_id=int(chain_id),
            )

        # unreachable: the loop either returns or raises
        raise ChainConnectionError(self._name, self._rpc_url, self._attempts)
