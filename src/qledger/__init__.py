"""qledger: order execution and dividend accrual against a holdings ledger."""

__version__ = "0.1.0"
