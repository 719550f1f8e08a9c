"""Market data lookup command."""

import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from qledger.services.data.csv_provider import CsvMarketData
from qledger.services.data.models import Instrument
from qledger.system.config import get_system_config

console = Console()


@click.command("price")
@click.argument("instrument")
@click.argument("on_date", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.option(
    "--data-root",
    "-d",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="CSV tree root (default: data.root_path from qledger.yaml)",
)
@click.option("--price-column", help="CSV price column (default: data.price_column from qledger.yaml)")
def price_command(instrument: str, on_date: datetime, data_root: Optional[Path], price_column: Optional[str]):
    """
    Show the price and dividend of INSTRUMENT (EXCHANGE:SYMBOL) on ON_DATE.

    \b
    Examples:
        qledger price NYSE:KO 2020-03-13
        qledger price NASDAQ:AAPL 2020-02-07 --data-root data/equities
    """
    system_config = get_system_config()
    provider = CsvMarketData(
        root_path=data_root or system_config.data.root_path,
        price_column=price_column or system_config.data.price_column,
        dividends_file=system_config.data.dividends_file,
    )

    try:
        parsed = Instrument.parse(instrument)
        checked = Instrument.create(parsed.exchange, parsed.symbol, provider)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    day = on_date.date()
    price = provider.get_price(day, checked)
    dividend = provider.get_dividend(day, checked)

    table = Table(title=f"{checked} on {day.isoformat()}", show_header=True, header_style="bold cyan")
    table.add_column("Field", style="green")
    table.add_column("Value", justify="right")
    table.add_row("Price", "[yellow]not available[/yellow]" if price is None else f"{price}")
    table.add_row("Dividend", "-" if dividend is None else f"{dividend}")
    console.print(table)
