"""Scenario run command."""

import sys
from pathlib import Path
from typing import Literal, Optional, cast

import click
from rich.console import Console

from qledger.engine.config import ConfigLoadError, load_scenario_config
from qledger.engine.runner import ScenarioError, ScenarioRunner
from qledger.services.reporting.formatters import create_execution_table, create_ledger_table
from qledger.system.config import reload_system_config
from qledger.system.log_system import LoggerFactory

console = Console()


@click.command("run")
@click.argument(
    "scenario_path",
    type=click.Path(exists=True, path_type=Path),
    required=True,
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="System config file (default: config/qledger.yaml, then ~/.qledger/qledger.yaml)",
)
@click.option(
    "--log-level",
    "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Set logging level (DEBUG shows clamping decisions)",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Only print the final ledger",
)
def run_command(scenario_path: Path, config_path: Optional[Path], log_level: Optional[str], quiet: bool):
    """
    Run a scenario file against a fresh ledger.

    \b
    Examples:
        qledger run scenarios/dividend_demo.yaml
        qledger run scenarios/dividend_demo.yaml -l debug
        qledger run scenarios/dividend_demo.yaml --config my_qledger.yaml -q
    """
    try:
        system_config = reload_system_config(config_path)

        if log_level:
            # Type cast since click already validated the choice
            level = cast(Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], log_level.upper())
            system_config.logging.level = level
        LoggerFactory.configure(system_config.logging.to_logger_config())

        config = load_scenario_config(scenario_path)
        decimals = system_config.execution.money_decimals

        if not quiet:
            console.rule(f"[bold blue]qledger: {config.scenario_id}[/bold blue]")
            console.print()
            console.print(create_ledger_table(config.build_ledger(), title="Initial Ledger", money_decimals=decimals))

        result = ScenarioRunner.from_config(config, system_config).run()

        if not quiet:
            for step in result.steps:
                title = f"Step {step.step_index + 1}: {step.action} on {step.on_date.isoformat()}"
                if step.action == "dividend":
                    console.print(f"[cyan]{title}[/cyan]  credited [green]{step.dividends_credited:,.2f}[/green]")
                else:
                    console.print(create_execution_table(step.results, title=title, money_decimals=decimals))

        console.print(create_ledger_table(result.ledger, title="Final Ledger", money_decimals=decimals))

    except (ConfigLoadError, ScenarioError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

