"""ovm_oracle - relays L2 state batch inclusion proofs from L1 to a downstream store."""

__version__ = "0.1.0"
