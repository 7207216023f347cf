"""Protocol interfaces for the oracle components."""

from ovm_oracle.interfaces.policy import PollPolicy
from ovm_oracle.interfaces.sink import ProofSink
from ovm_oracle.interfaces.source import ProofSource

__all__ = ["PollPolicy", "ProofSink", "ProofSource"]
