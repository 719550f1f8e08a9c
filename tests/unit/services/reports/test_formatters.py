"""Unit tests for rich ledger and execution tables."""

import io
from decimal import Decimal

from rich.console import Console

from qledger.services.portfolio.models import ExecutionResult, ExecutionStatus, Ledger
from qledger.services.reporting.formatters import create_execution_table, create_ledger_table, display_ledger


def _render(renderable) -> str:
    console = Console(file=io.StringIO(), width=120, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


class TestLedgerTable:
    """Tests for create_ledger_table."""

    def test_rows_for_holdings_and_capital(self, ko, pep):
        ledger = Ledger(holdings={ko: Decimal("39"), pep: Decimal("2.50")}, capital=Decimal("1234.5"))

        text = _render(create_ledger_table(ledger))

        assert "KO" in text
        assert "NYSE" in text
        assert "39" in text
        assert "2.5" in text
        assert "1,234.50" in text

    def test_empty_ledger(self):
        text = _render(create_ledger_table(Ledger(capital=Decimal("0"))))

        assert "no holdings" in text
        assert "0.00" in text

    def test_display_ledger_prints_title(self, ko):
        console = Console(file=io.StringIO(), width=120, color_system=None)

        display_ledger(Ledger(holdings={ko: Decimal("1")}), console=console, title="Final Ledger")

        assert "Final Ledger" in console.file.getvalue()


class TestExecutionTable:
    """Tests for create_execution_table."""

    def test_sentinel_rows_show_dash(self, ko, unknown):
        results = {
            ko: ExecutionResult(quantity=Decimal("39"), price=Decimal("25"), status=ExecutionStatus.CLAMPED),
            unknown: ExecutionResult.no_transaction(ExecutionStatus.PRICE_UNAVAILABLE),
        }

        text = _render(create_execution_table(results))

        assert "NYSE:KO" in text
        assert "25.00" in text
        assert "clamped" in text
        assert "NYSE:XYZ" in text
        assert "price_unavailable" in text
        assert " - " in text

    def test_sub_cent_price_keeps_its_precision(self, ko):
        results = {ko: ExecutionResult(quantity=Decimal("2"), price=Decimal("12.345"), status=ExecutionStatus.FILLED)}

        text = _render(create_execution_table(results))

        assert "12.345" in text


class TestMoneyDecimals:
    """Tests for the configured number of money decimals."""

    def test_capital_uses_money_decimals(self):
        ledger = Ledger(capital=Decimal("1000.1234"))

        assert "1,000.1234" in _render(create_ledger_table(ledger, money_decimals=4))
        assert "1,000.12" in _render(create_ledger_table(ledger))

    def test_price_padded_to_money_decimals(self, ko):
        results = {ko: ExecutionResult(quantity=Decimal("1"), price=Decimal("25"), status=ExecutionStatus.FILLED)}

        assert "25.0000" in _render(create_execution_table(results, money_decimals=4))
