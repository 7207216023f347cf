"""Polling engine - bootstraps chain access and relays proofs index by index."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import signal

from eth_account import Account

from ovm_oracle.chain.connector import ChainConnection, ChainConnector
from ovm_oracle.chain.proofs import StateBatchProofSource
from ovm_oracle.chain.registry import ContractRegistryResolver
from ovm_oracle.errors import (
    ConfigError,
    FatalOracleError,
    ProofLookupError,
    ProofNotAvailable,
)
from ovm_oracle.interfaces import PollPolicy, ProofSink, ProofSource
from ovm_oracle.models.config import OracleConfig
from ovm_oracle.models.records import (
    Chain,
    DeliveryResult,
    EngineState,
    OracleStats,
    TickOutcome,
)
from ovm_oracle.policy import make_policy
from ovm_oracle.sink import open_sink

log = logging.getLogger(__name__)


class ProofOracle:
    """Relays state batch inclusion proofs for consecutive L2 indices.

    Lifecycle: BOOTSTRAPPING -> RUNNING -> STOPPED or FAILED. The cursor only
    moves forward, and only after a proof for it was delivered.
    """

    def __init__(
        self,
        cfg: OracleConfig,
        source: ProofSource | None = None,
        sink: ProofSink | None = None,
        policy: PollPolicy | None = None,
    ) -> None:
        self._cfg = cfg
        self._running = False
        self._stop_event = asyncio.Event()

        if not cfg.l1_wallet_key:
            raise ConfigError("No L1 wallet key configured.")
        try:
            self._account = Account.from_key(cfg.l1_wallet_key)
        except Exception as exc:
            raise ConfigError(f"Invalid L1 wallet key: {exc}") from exc

        self.state = EngineState.BOOTSTRAPPING
        self.stats = OracleStats()
        self.source = source
        self.sink = sink
        if policy is None:
            try:
                policy = make_policy(cfg)
            except ValueError as exc:
                raise ConfigError(f"Invalid poll policy: {exc}") from exc
        self.policy = policy
        self.connections: list[ChainConnection] = []
        self.contracts: dict = {}

        # Cursor state, owned by the polling loop only
        self.next_index: int | None = None
        self.l1_height_ceiling: int | None = None

    @property
    def address(self) -> str:
        return self._account.address

    @property
    def running(self) -> bool:
        return self._running

    # ── Bootstrap ──────────────────────────────────────────

    def _make_connector(self, name: str, rpc_url: str) -> ChainConnector:
        return ChainConnector(
            name,
            rpc_url,
            attempts=self._cfg.connect_attempts,
            retry_delay=self._cfg.connect_retry_delay,
        )

    async def bootstrap(self) -> None:
        """Connect both chains, resolve contracts and open the sink.

        Components passed to the constructor are used as-is.
        """
        log.info("Using L1 EOA %s", self.address)

        if self.source is None:
            l1 = await self._make_connector("L1", self._cfg.l1_rpc_url).connect()
            self.connections.append(l1)
            l2 = await self._make_connector("L2", self._cfg.l2_rpc_url).connect()
            self.connections.append(l2)

            resolver = ContractRegistryResolver(self._cfg.address_manager, l1)
            self.contracts = await resolver.resolve()

            self.source = StateBatchProofSource(
                l1,
                l2,
                self.contracts,
                start_block=self._cfg.l1_start_offset,
                log_chunk_size=self._cfg.log_chunk_size,
            )

        if self.sink is None:
            self.sink = await open_sink(self._cfg.sink)

    async def _ceiling(self) -> int:
        latest = await self.source.current_height(Chain.L1)
        return max(0, latest - self._cfg.safety_lag)

    async def _enter_running(self) -> None:
        self.l1_height_ceiling = await self._ceiling()
        l2_height = await self.source.current_height(Chain.L2)
        self.next_index = max(0, l2_height - 1)
        self.state = EngineState.RUNNING
        log.info(
            "Polling from L2 index %d (L1 ceiling %d, safety lag %d)",
            self.next_index, self.l1_height_ceiling, self._cfg.safety_lag,
        )

    # ── Lifecycle ──────────────────────────────────────────

    async def start(self) -> None:
        """Bootstrap, then run the polling loop until stopped."""
        log.info("Starting ovm_oracle")
        log.info("  L1 RPC: %s", self._cfg.l1_rpc_url)
        log.info("  L2 RPC: %s", self._cfg.l2_rpc_url)
        log.info("  Address manager: %s", self._cfg.address_manager)
        log.info("  Sink: %s", self._cfg.sink.kind.value)
        log.info("  Poll interval: %d ms", self._cfg.poll_interval)

        self._running = True
        try:
            await self.bootstrap()
            await self._enter_running()
        except Exception as exc:
            self.state = EngineState.FAILED
            self._running = False
            log.error("Bootstrap failed: %s", exc)
            await self._close()
            raise

        try:
            await self._main_loop()
        except FatalOracleError as exc:
            self.state = EngineState.FAILED
            log.error("Fatal error, stopping: %s", exc)
            raise
        finally:
            self._running = False
            await self._close()

        self.state = EngineState.STOPPED
        log.info(
            "Oracle stopped at index %d (%d delivered, %d lookup faults, %d delivery faults)",
            self.next_index, self.stats.delivered,
            self.stats.lookup_faults, self.stats.delivery_faults,
        )

    async def stop(self) -> None:
        """Signal the loop to stop after the current tick."""
        log.info("Stop requested")
        self._running = False
        self._stop_event.set()

    async def _close(self) -> None:
        if self.sink is not None:
            await self.sink.close()
        for conn in self.connections:
            await conn.close()

    # ── Polling loop ───────────────────────────────────────

    async def _wait(self, delay: float) -> bool:
        """Sleep for delay seconds. Returns True if stop was requested meanwhile."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
        except TimeoutError:
            return False
        return True

    async def _main_loop(self) -> None:
        outcome: TickOutcome | None = None
        while self._running:
            if await self._wait(self.policy.next_delay(outcome)):
                break
            outcome = await self._tick()

    async def _tick(self) -> TickOutcome:
        """Run one poll iteration for the current cursor."""
        index = self.next_index
        log.info("Start to find transaction proof (l2-tx-index %d)", index)

        if self._cfg.refresh_ceiling:
            try:
                self.l1_height_ceiling = await self._ceiling()
            except FatalOracleError:
                raise
            except Exception as exc:
                return self._record(TickOutcome.LOOKUP_FAULT, f"L1 height refresh failed: {exc}")

        try:
            proof = await self.source.get_batch_proof(index, self.l1_height_ceiling)
        except ProofNotAvailable as exc:
            log.debug("Proof for index %d not available yet: %s", index, exc)
            return self._record(TickOutcome.NOT_YET_AVAILABLE)
        except ProofLookupError as exc:
            return self._record(TickOutcome.LOOKUP_FAULT, str(exc))
        except FatalOracleError:
            raise
        except Exception as exc:
            log.error("Unexpected proof lookup error for index %d", index, exc_info=True)
            return self._record(TickOutcome.LOOKUP_FAULT, str(exc))

        if proof.index != index:
            proof = dataclasses.replace(proof, index=index)

        try:
            result = await self.sink.deliver(proof)
        except FatalOracleError:
            raise
        except Exception as exc:
            log.error("Unexpected delivery error for index %d", index, exc_info=True)
            result = DeliveryResult(success=False, index=index, error=str(exc))

        if not result.success:
            return self._record(TickOutcome.DELIVERY_FAULT, result.error)

        self.next_index = index + 1
        return self._record(TickOutcome.DELIVERED)

    def _record(self, outcome: TickOutcome, detail: str | None = None) -> TickOutcome:
        self.stats.record(outcome)
        if outcome.is_fault:
            log.warning(
                "Index %d: %s%s (%d consecutive faults)",
                self.next_index,
                outcome.value,
                f" ({detail})" if detail else "",
                self.stats.consecutive_faults,
            )
        return outcome


async def run_oracle(cfg: OracleConfig) -> None:
    """Entry point for running the oracle with signal handling."""
    oracle = ProofOracle(cfg)

    loop = asyncio.get_running_loop()

    def _signal_handler():
        asyncio.ensure_future(oracle.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass

    await oracle.start()
