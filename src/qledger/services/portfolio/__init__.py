"""Portfolio ledger and order execution."""

from qledger.services.portfolio.config import ExecutionConfig
from qledger.services.portfolio.executor import OrderExecutor, add_dividend, buy, sell
from qledger.services.portfolio.models import NO_TRANSACTION, ExecutionResult, ExecutionStatus, Ledger

__all__ = [
    "ExecutionConfig",
    "ExecutionResult",
    "ExecutionStatus",
    "Ledger",
    "NO_TRANSACTION",
    "OrderExecutor",
    "add_dividend",
    "buy",
    "sell",
]
