"""
Portfolio data models.

Ledger: holdings plus liquid capital for one portfolio
ExecutionResult: outcome of one buy/sell leg
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional

from qledger.services.data.models import Instrument
from qledger.services.data.provider import MarketDataProvider, to_decimal
from qledger.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()


class ExecutionStatus(str, Enum):
    """How a requested leg was settled."""

    FILLED = "filled"  # Full requested quantity transacted
    CLAMPED = "clamped"  # Reduced to what capital or holdings allowed
    ZERO_QUANTITY = "zero_quantity"  # Priced, but nothing could be transacted
    PRICE_UNAVAILABLE = "price_unavailable"
    NOT_HELD = "not_held"  # Sell of an instrument with no position


@dataclass(frozen=True)
class ExecutionResult:
    """
    Result of a single buy or sell leg.

    price is None when no transaction occurred because the instrument could
    not be priced or is not held.

    Example:
        >>> shares, price = result.as_tuple()
    """

    quantity: Decimal
    price: Optional[Decimal]
    status: ExecutionStatus

    @property
    def executed(self) -> bool:
        """True if any shares changed hands."""
        return self.quantity > 0

    def as_tuple(self) -> tuple[Decimal, Optional[Decimal]]:
        return self.quantity, self.price

    @classmethod
    def no_transaction(cls, status: ExecutionStatus) -> "ExecutionResult":
        return cls(quantity=Decimal("0"), price=None, status=status)


# Result of a leg that could not be priced. A refused sell has the same
# (0, None) tuple but status NOT_HELD, so compare as_tuple() to test for
# "no transaction" regardless of cause.
NO_TRANSACTION = ExecutionResult.no_transaction(ExecutionStatus.PRICE_UNAVAILABLE)


@dataclass
class Ledger:
    """
    Holdings and liquid capital for one portfolio.

    Holdings map Instrument to a positive share count; a position that
    reaches zero is removed. Insertion order of holdings is preserved.

    Attributes:
        holdings: Instrument -> shares held (always > 0)
        capital: Liquid balance

    Example:
        >>> ledger = Ledger(capital=Decimal("1000"))
        >>> ledger.shares(Instrument("NYSE", "KO"))
        Decimal('0')
    """

    holdings: dict[Instrument, Decimal] = field(default_factory=dict)
    capital: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        self.capital = to_decimal(self.capital)
        holdings: dict[Instrument, Decimal] = {}
        for instrument, shares in self.holdings.items():
            shares = to_decimal(shares)
            if shares <= 0:
                raise ValueError(f"Holding for {instrument} must be positive, got {shares}")
            holdings[instrument] = shares
        self.holdings = holdings

    # ==================== Queries ====================

    def shares(self, instrument: Instrument) -> Decimal:
        """Shares held in instrument (0 if no position)."""
        return self.holdings.get(instrument, Decimal("0"))

    def holds(self, instrument: Instrument) -> bool:
        return instrument in self.holdings

    def market_value(self, on_date: date, provider: MarketDataProvider) -> Decimal:
        """
        Capital plus holdings valued at on_date prices.

        Holdings that cannot be priced on on_date are left out of the total.
        """
        total = self.capital
        for instrument, shares in self.holdings.items():
            price = provider.get_price(on_date, instrument)
            if price is None:
                logger.warning(
                    "ledger.valuation_price_missing",
                    instrument=str(instrument),
                    date=on_date.isoformat(),
                )
                continue
            total += shares * price
        return total

    # ==================== Mutation ====================

    def add_shares(self, instrument: Instrument, shares: Decimal) -> None:
        if shares <= 0:
            raise ValueError(f"Shares to add must be positive, got {shares}")
        self.holdings[instrument] = self.holdings.get(instrument, Decimal("0")) + shares

    def remove_shares(self, instrument: Instrument, shares: Decimal) -> None:
        """Remove shares; drops the position when it reaches exactly zero."""
        held = self.holdings.get(instrument)
        if held is None or shares > held:
            raise ValueError(f"Cannot remove {shares} shares of {instrument}, holding {held or 0}")
        if shares == held:
            del self.holdings[instrument]
        else:
            self.holdings[instrument] = held - shares

    # ==================== Persistence ====================

    def get_snapshot(self) -> dict[str, Any]:
        """
        JSON-safe snapshot of the ledger.

        Decimals are written as strings, instruments as EXCHANGE:SYMBOL.
        """
        return {
            "capital": str(self.capital),
            "holdings": {str(instrument): str(shares) for instrument, shares in self.holdings.items()},
        }

    @classmethod
    def from_snapshot(cls, snapshot: Mapping[str, Any]) -> "Ledger":
        """Rebuild a ledger from get_snapshot() output."""
        holdings = {Instrument.parse(key): to_decimal(value) for key, value in snapshot.get("holdings", {}).items()}
        return cls(holdings=holdings, capital=to_decimal(snapshot.get("capital", "0")))
