"""Rich console rendering of ledgers and execution results."""

from decimal import Decimal
from typing import Mapping, Optional

from rich.console import Console
from rich.table import Table

from qledger.services.data.models import Instrument
from qledger.services.portfolio.models import ExecutionResult, ExecutionStatus, Ledger

_STATUS_STYLES = {
    ExecutionStatus.FILLED: "green",
    ExecutionStatus.CLAMPED: "yellow",
    ExecutionStatus.ZERO_QUANTITY: "dim",
    ExecutionStatus.PRICE_UNAVAILABLE: "red",
    ExecutionStatus.NOT_HELD: "red",
}


def _format_money(amount: Decimal, decimals: int = 2) -> str:
    return f"{amount:,.{decimals}f}"


def _format_price(price: Decimal, decimals: int = 2) -> str:
    # At least `decimals` places, more if the quote has them (12.345 stays 12.345)
    exponent = price.normalize().as_tuple().exponent
    places = max(decimals, -exponent if isinstance(exponent, int) else 0)
    return _format_money(price, places)


def _format_shares(shares: Decimal) -> str:
    # Whole shares print without a trailing ".0"
    if shares == shares.to_integral_value():
        return f"{shares.to_integral_value():,}"
    return f"{shares.normalize():,}"


def create_ledger_table(ledger: Ledger, title: str = "Ledger", money_decimals: int = 2) -> Table:
    """
    Build a table of capital and holdings.

    Args:
        ledger: Ledger to render
        title: Table title
        money_decimals: Decimal places shown for capital

    Returns:
        rich Table with one row per holding and a capital row
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Instrument", style="green", no_wrap=True)
    table.add_column("Exchange", style="cyan")
    table.add_column("Shares", justify="right")

    for instrument, shares in ledger.holdings.items():
        table.add_row(instrument.symbol, instrument.exchange, _format_shares(shares))

    if not ledger.holdings:
        table.add_row("[dim]no holdings[/dim]", "", "")

    table.add_section()
    table.add_row("[bold]Capital[/bold]", "", f"[bold]{_format_money(ledger.capital, money_decimals)}[/bold]")
    return table


def create_execution_table(
    results: Mapping[Instrument, ExecutionResult],
    title: str = "Executions",
    money_decimals: int = 2,
) -> Table:
    """Build a table with one row per order leg. Prices keep any extra precision."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Instrument", style="green", no_wrap=True)
    table.add_column("Quantity", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Status")

    for instrument, result in results.items():
        style = _STATUS_STYLES[result.status]
        table.add_row(
            str(instrument),
            _format_shares(result.quantity),
            "-" if result.price is None else _format_price(result.price, money_decimals),
            f"[{style}]{result.status.value}[/{style}]",
        )
    return table


def display_ledger(
    ledger: Ledger,
    console: Optional[Console] = None,
    title: str = "Ledger",
    money_decimals: int = 2,
) -> None:
    """Print a ledger table to the console."""
    console = console or Console()
    console.print(create_ledger_table(ledger, title=title, money_decimals=money_decimals))
