"""qledger command line entry point."""

import click

from qledger import __version__
from qledger.cli.commands.price import price_command
from qledger.cli.commands.run import run_command


@click.group()
@click.version_option(__version__, prog_name="qledger")
def cli():
    """qledger - simulate orders and dividends against a holdings ledger"""
    pass


cli.add_command(run_command)
cli.add_command(price_command)


if __name__ == "__main__":
    cli()
