"""Console presentation of ledger state and execution results."""

from qledger.services.reporting.formatters import create_execution_table, create_ledger_table, display_ledger

__all__ = [
    "create_execution_table",
    "create_ledger_table",
    "display_ledger",
]
