"""Shared fixtures for ovm_oracle tests."""

from __future__ import annotations

import asyncio

import pytest

from ovm_oracle.models.config import OracleConfig, SinkConfig, SinkKind
from ovm_oracle.oracle import ProofOracle
from ovm_oracle.policy import FixedIntervalPolicy
from ovm_oracle.sink.sqlite import SQLiteProofStore

from tests.mocks import MockProofSource, MockSink

# Well-known development key (hardhat account #0), never funded on a real network
TEST_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

REGISTRY_ADDRESS = "0x100Dd3b414Df5BbA2B542864fF94aF8024aFdf3a"


def make_test_config(**overrides) -> OracleConfig:
    """Build an OracleConfig suitable for testing."""
    defaults = dict(
        poll_interval=1,
        safety_lag=100,
        refresh_ceiling=True,
        l1_rpc_url="http://127.0.0.1:8545",
        l2_rpc_url="http://127.0.0.1:8546",
        l1_wallet_key=TEST_KEY,
        l1_start_offset=0,
        address_manager=REGISTRY_ADDRESS,
        connect_attempts=10,
        connect_retry_delay=0,
        sink=SinkConfig(kind=SinkKind.SQLITE, db_path=":memory:"),
    )
    defaults.update(overrides)
    return OracleConfig(**defaults)


async def run_until(oracle: ProofOracle, predicate, timeout: float = 2.0) -> None:
    """Run oracle.start() until predicate() holds, then stop it and wait for exit."""
    task = asyncio.create_task(oracle.start())
    try:
        async with asyncio.timeout(timeout):
            while not predicate():
                if task.done():
                    break
                await asyncio.sleep(0.001)
    finally:
        await oracle.stop()
        await asyncio.wait_for(task, timeout)


@pytest.fixture
def test_config():
    """Default OracleConfig for tests."""
    return make_test_config()


@pytest.fixture
def mock_source():
    return MockProofSource(l1_height=1000, l2_height=100)


@pytest.fixture
def mock_sink():
    return MockSink(succeed=True)


@pytest.fixture
async def store():
    """Initialized in-memory SQLiteProofStore."""
    s = SQLiteProofStore(":memory:")
    await s.initialize()
    yield s
    await s.close()


@pytest.fixture
async def oracle(test_config, mock_source, mock_sink):
    """ProofOracle wired to mocks, bootstrapped and in the RUNNING state."""
    o = ProofOracle(
        test_config,
        source=mock_source,
        sink=mock_sink,
        policy=FixedIntervalPolicy(0),
    )
    await o.bootstrap()
    await o._enter_running()
    return o
