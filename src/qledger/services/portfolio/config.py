"""Order execution configuration.

Controls when the per-batch fee is charged and whether dividend credits
are rounded like trade proceeds.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0"}


def parse_bool(value: Any) -> bool:
    """
    Read a YAML flag that may have arrived as text.

    ${VAR} substitution always yields strings, so "false" must mean False.

    Raises:
        ValueError: If value is a string that is not a recognised flag
    """
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        raise ValueError(f"Expected a boolean flag, got {value!r}")
    return bool(value)


@dataclass
class ExecutionConfig:
    """
    Execution policy settings.

    Attributes:
        default_fee: Fee used when a call passes fee=None
        charge_fee_on_empty_batch: Charge the batch fee even when no leg transacted
        round_dividends: Round accrued dividend credits to money_decimals
        money_decimals: Decimal places kept on capital and trade proceeds

    Example:
        >>> config = ExecutionConfig(default_fee=Decimal("9.99"))
        >>> config.charge_fee_on_empty_batch
        True
    """

    default_fee: Decimal = Decimal("0")
    charge_fee_on_empty_batch: bool = True
    round_dividends: bool = False
    money_decimals: int = 2

    def __post_init__(self) -> None:
        self.default_fee = Decimal(str(self.default_fee))
        if self.default_fee < 0:
            raise ValueError(f"default_fee cannot be negative, got {self.default_fee}")
        if self.money_decimals < 0:
            raise ValueError(f"money_decimals cannot be negative, got {self.money_decimals}")

    @property
    def money_quantum(self) -> Decimal:
        """Smallest monetary increment, e.g. Decimal('0.01') for 2 decimals."""
        return Decimal(1).scaleb(-self.money_decimals)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "ExecutionConfig":
        """Build from the `execution` section of qledger.yaml."""
        return cls(
            default_fee=Decimal(str(config_dict.get("default_fee", "0"))),
            charge_fee_on_empty_batch=parse_bool(config_dict.get("charge_fee_on_empty_batch", True)),
            round_dividends=parse_bool(config_dict.get("round_dividends", False)),
            money_decimals=int(config_dict.get("money_decimals", 2)),
        )
