"""
Scenario runner.

Replays the dated steps of a ScenarioConfig against a fresh Ledger using an
OrderExecutor and collects the outcome of every step.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from qledger.engine.config import ScenarioConfig, ScenarioStep
from qledger.services.data.csv_provider import CsvMarketData
from qledger.services.data.models import Instrument, InstrumentValidator, InvalidInstrumentError
from qledger.services.data.provider import InMemoryMarketData, MarketDataProvider
from qledger.services.portfolio.executor import OrderExecutor
from qledger.services.portfolio.models import ExecutionResult, Ledger
from qledger.system.config import SystemConfig
from qledger.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()


class ScenarioError(Exception):
    """Raised when a scenario cannot be run."""

    pass


@dataclass
class StepOutcome:
    """What one scenario step did."""

    step_index: int
    on_date: date
    action: str
    results: dict[Instrument, ExecutionResult] = field(default_factory=dict)
    dividends_credited: Decimal = Decimal("0")
    capital_after: Decimal = Decimal("0")


@dataclass
class ScenarioResult:
    """Final ledger plus per-step outcomes."""

    scenario_id: str
    ledger: Ledger
    steps: list[StepOutcome] = field(default_factory=list)

    @property
    def executed_legs(self) -> int:
        return sum(1 for step in self.steps for result in step.results.values() if result.executed)


class ScenarioRunner:
    """
    Runs a scenario end to end.

    Example:
        >>> config = load_scenario_config("scenarios/dividend_demo.yaml")
        >>> result = ScenarioRunner.from_config(config).run()
        >>> print(result.ledger.get_snapshot())
    """

    def __init__(
        self,
        config: ScenarioConfig,
        provider: MarketDataProvider,
        system_config: Optional[SystemConfig] = None,
    ):
        self.config = config
        self.provider = provider
        self.system_config = system_config or SystemConfig()
        self.executor = OrderExecutor(provider, self.system_config.execution)

    @classmethod
    def from_config(cls, config: ScenarioConfig, system_config: Optional[SystemConfig] = None) -> "ScenarioRunner":
        """
        Build a runner, choosing the market data provider from the scenario.

        Inline prices/dividends give an InMemoryMarketData; otherwise a
        CsvMarketData over the scenario's root_path (or the system data root).
        """
        system_config = system_config or SystemConfig()
        return cls(config, build_provider(config, system_config), system_config)

    def run(self) -> ScenarioResult:
        """
        Execute every step in listed order.

        Returns:
            ScenarioResult with the final ledger

        Raises:
            ScenarioError: If instrument validation is enabled and fails
        """
        if self.config.validate_instruments:
            self._validate_instruments()

        ledger = self.config.build_ledger()
        result = ScenarioResult(scenario_id=self.config.scenario_id, ledger=ledger)

        logger.info(
            "scenario_runner.started",
            scenario_id=self.config.scenario_id,
            steps=len(self.config.steps),
            initial_capital=str(ledger.capital),
        )

        for index, step in enumerate(self.config.steps):
            result.steps.append(self._run_step(index, step, ledger))

        logger.info(
            "scenario_runner.completed",
            scenario_id=self.config.scenario_id,
            final_capital=str(ledger.capital),
            holdings=len(ledger.holdings),
            executed_legs=result.executed_legs,
        )
        return result

    def _run_step(self, index: int, step: ScenarioStep, ledger: Ledger) -> StepOutcome:
        outcome = StepOutcome(step_index=index, on_date=step.on_date, action=step.action)
        fee = step.fee if step.fee is not None else self.config.fee

        if step.action == "dividend":
            outcome.dividends_credited = self.executor.add_dividend(ledger, step.on_date)
        else:
            orders = step.instrument_orders()
            if step.is_batch:
                if step.action == "buy":
                    outcome.results = self.executor.buy_batch(ledger, orders, step.on_date, fee)
                else:
                    outcome.results = self.executor.sell_batch(ledger, orders, step.on_date, fee)
            else:
                # Unbatched legs each pay their own fee
                trade = self.executor.buy if step.action == "buy" else self.executor.sell
                for instrument, quantity in orders.items():
                    outcome.results[instrument] = trade(ledger, instrument, quantity, step.on_date, fee)

        outcome.capital_after = ledger.capital
        return outcome

    def _validate_instruments(self) -> None:
        if not isinstance(self.provider, InstrumentValidator):
            raise ScenarioError(f"{type(self.provider).__name__} cannot validate instruments")

        invalid: list[str] = []
        for instrument in self.config.all_instruments():
            try:
                Instrument.create(instrument.exchange, instrument.symbol, self.provider)
            except InvalidInstrumentError:
                invalid.append(str(instrument))
        if invalid:
            raise ScenarioError(f"Scenario '{self.config.scenario_id}' uses unknown instruments: {invalid}")


def build_provider(config: ScenarioConfig, system_config: SystemConfig) -> MarketDataProvider:
    """Create the market data provider a scenario asks for."""
    data = config.data
    if data.is_inline:
        prices = {Instrument.parse(key): series for key, series in data.prices.items()}
        dividends = {Instrument.parse(key): series for key, series in data.dividends.items()}
        return InMemoryMarketData().load(prices=prices, dividends=dividends)

    return CsvMarketData(
        root_path=data.root_path or system_config.data.root_path,
        price_column=data.price_column or system_config.data.price_column,
        dividends_file=system_config.data.dividends_file,
    )
