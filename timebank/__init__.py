"""Time bank ledger and earning-claim resolution engine."""

__version__ = "0.1.0"
