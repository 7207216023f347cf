"""Exception taxonomy for the oracle.

Bootstrap and configuration errors are fatal and surface at the process entry
point. Proof errors are recoverable and retried by the polling engine on the
next tick.
"""

from __future__ import annotations


class OracleError(Exception):
    """Base class for all ovm_oracle errors."""


class ConfigError(OracleError):
    """Configuration is missing or invalid."""


class BootstrapError(OracleError):
    """Startup could not complete; the process must not start polling."""


class ChainConnectionError(BootstrapError):
    """A chain endpoint stayed unreachable after the whole retry budget.

    Attributes:
        chain: Chain name ("L1" or "L2").
        rpc_url: The endpoint that was tried.
        attempts: How many liveness checks were made.
    """

    def __init__(self, chain: str, rpc_url: str, attempts: int) -> None:
        self.chain = chain
        self.rpc_url = rpc_url
        self.attempts = attempts
        super().__init__(
            f"Unable to connect to the {chain} network after {attempts} attempts, "
            f"check that your {chain} endpoint is correct ({rpc_url})"
        )


class ContractResolutionError(BootstrapError):
    """A named contract could not be resolved from the address manager."""

    def __init__(self, contract_name: str, reason: str) -> None:
        self.contract_name = contract_name
        self.reason = reason
        super().__init__(f"Unable to resolve {contract_name}: {reason}")


class ProofError(OracleError):
    """Base class for proof lookup failures."""


class ProofNotAvailable(ProofError):
    """The batch holding the index is not committed at or below the ceiling yet.

    Routine: the engine retries the same index on the next tick.
    """


class ProofLookupError(ProofError):
    """An RPC or data fault occurred while building a proof."""


class FatalOracleError(OracleError):
    """Unrecoverable runtime fault; stops the polling engine.

    The built-in source and sinks never raise it. Injected ProofSource or
    ProofSink implementations raise it to abort polling instead of having the
    fault counted and retried.
    """
