"""
Scenario Configuration Models.

Philosophy: Clean separation of concerns
- qledger.yaml: execution policy, data location, logging (SystemConfig)
- scenario YAML: ONLY run inputs (initial ledger, market data, dated steps)

Example YAML:
    ```yaml
    scenario_id: dividend_demo
    initial_capital: 10000
    holdings:
      "NYSE:KO": 10
    fee: 1.0
    data:
      prices:
        "NYSE:KO": {2020-01-02: 54.69, 2020-03-13: 48.10}
      dividends:
        "NYSE:KO": {2020-03-13: 0.41}
    steps:
      - date: 2020-01-02
        action: buy
        orders: {"NYSE:KO": 5}
      - date: 2020-03-13
        action: dividend
    ```
"""

from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from qledger.services.data.models import Instrument
from qledger.services.portfolio.models import Ledger


def _validate_instrument_keys(value: dict) -> dict:
    for key in value:
        Instrument.parse(key)
    return value


class ScenarioDataConfig(BaseModel):
    """Market data for a scenario.

    Either point at a CSV tree (root_path) or give prices and dividends
    inline. With neither, the data root from SystemConfig is used.
    """

    root_path: Optional[str] = Field(default=None, description="CSV tree root (<root>/<EXCHANGE>/<SYMBOL>.csv)")
    price_column: Optional[str] = Field(default=None, description="CSV price column (SystemConfig default if omitted)")
    prices: dict[str, dict[date, Decimal]] = Field(
        default_factory=dict, description="Inline prices: EXCHANGE:SYMBOL -> {date: price}"
    )
    dividends: dict[str, dict[date, Decimal]] = Field(
        default_factory=dict, description="Inline dividends: EXCHANGE:SYMBOL -> {date: amount per share}"
    )

    @field_validator("prices", "dividends")
    @classmethod
    def validate_instruments(cls, v: dict) -> dict:
        return _validate_instrument_keys(v)

    @property
    def is_inline(self) -> bool:
        return self.root_path is None and bool(self.prices or self.dividends)


class ScenarioStep(BaseModel):
    """One dated action in a scenario."""

    model_config = ConfigDict(populate_by_name=True)

    on_date: date = Field(..., alias="date", description="Trade or dividend date")
    action: Literal["buy", "sell", "dividend"] = Field(..., description="What to do on this date")
    orders: dict[str, Decimal] = Field(
        default_factory=dict, description="EXCHANGE:SYMBOL -> quantity, in settlement priority order"
    )
    fee: Optional[Decimal] = Field(default=None, ge=0, description="Override scenario fee for this step")
    batch: Optional[bool] = Field(
        default=None,
        description="Settle as one batch with a single fee (default: batch when more than one order)",
    )

    @field_validator("orders")
    @classmethod
    def validate_orders(cls, v: dict[str, Decimal]) -> dict[str, Decimal]:
        _validate_instrument_keys(v)
        for key, quantity in v.items():
            if quantity < 0:
                raise ValueError(f"Order quantity for {key} cannot be negative, got {quantity}")
        return v

    @model_validator(mode="after")
    def validate_action_orders(self) -> "ScenarioStep":
        if self.action == "dividend" and self.orders:
            raise ValueError("Dividend steps take no orders")
        if self.action in ("buy", "sell") and not self.orders:
            raise ValueError(f"{self.action} step on {self.on_date} needs at least one order")
        return self

    @property
    def is_batch(self) -> bool:
        if self.batch is not None:
            return self.batch
        return len(self.orders) > 1

    def instrument_orders(self) -> dict[Instrument, Decimal]:
        return {Instrument.parse(key): quantity for key, quantity in self.orders.items()}


class ScenarioConfig(BaseModel):
    """Scenario run configuration.

    Contains ONLY per-run inputs. Execution policy (batch fee charging,
    dividend rounding) comes from SystemConfig.
    """

    scenario_id: str = Field(..., description="Descriptive identifier for this scenario")
    initial_capital: Decimal = Field(..., description="Starting liquid capital")
    holdings: dict[str, Decimal] = Field(default_factory=dict, description="Starting holdings: EXCHANGE:SYMBOL -> shares")
    fee: Optional[Decimal] = Field(default=None, ge=0, description="Fee per trade or batch (SystemConfig default if omitted)")
    validate_instruments: bool = Field(
        default=False, description="Check every instrument against the data source before running"
    )
    data: ScenarioDataConfig = Field(default_factory=ScenarioDataConfig)
    steps: list[ScenarioStep] = Field(default_factory=list, description="Actions, executed in listed order")

    @field_validator("holdings")
    @classmethod
    def validate_holdings(cls, v: dict[str, Decimal]) -> dict[str, Decimal]:
        _validate_instrument_keys(v)
        for key, shares in v.items():
            if shares <= 0:
                raise ValueError(f"Initial holding for {key} must be positive, got {shares}")
        return v

    def instrument_holdings(self) -> dict[Instrument, Decimal]:
        return {Instrument.parse(key): shares for key, shares in self.holdings.items()}

    def build_ledger(self) -> Ledger:
        """Fresh ledger holding the initial capital and holdings."""
        return Ledger(holdings=self.instrument_holdings(), capital=self.initial_capital)

    def all_instruments(self) -> list[Instrument]:
        """Every instrument named in holdings or orders, first mention first."""
        seen: dict[Instrument, None] = dict.fromkeys(self.instrument_holdings())
        for step in self.steps:
            for instrument in step.instrument_orders():
                seen.setdefault(instrument, None)
        return list(seen)


class ConfigLoadError(Exception):
    """Raised when config loading fails."""

    pass


def load_scenario_config(config_path: str | Path) -> ScenarioConfig:
    """
    Load and validate scenario configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated ScenarioConfig object

    Raises:
        ConfigLoadError: If file not found, invalid YAML, or validation fails
    """
    path = Path(config_path)

    if not path.exists():
        raise ConfigLoadError(f"Config file not found: {path}")

    try:
        with path.open() as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigLoadError(f"Config must be a YAML dictionary, got {type(raw_config)}")

    try:
        config = ScenarioConfig(**raw_config)
    except Exception as e:
        raise ConfigLoadError(f"Config validation failed: {e}") from e

    return config
