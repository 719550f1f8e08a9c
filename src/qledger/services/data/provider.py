"""Market data provider contract and in-memory implementation.

The order executor only ever asks one question: what is the value of this
field for this instrument on this date. Providers answer with a Decimal or
None; None covers both an unknown instrument and a date without data.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional

from qledger.services.data.models import Instrument, MarketField


def _normalize_date(value: date) -> date:
    """Ensure datetime inputs are converted to date objects."""

    if isinstance(value, datetime):
        return value.date()
    return value


def to_decimal(value: Any) -> Decimal:
    """Convert int/float/str to Decimal via its string form (no binary float noise)."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class MarketDataProvider(ABC):
    """Point-in-time lookup of prices and dividends."""

    @abstractmethod
    def query(self, on_date: date, instrument: Instrument, field: MarketField) -> Optional[Decimal]:
        """
        Look up a field value.

        Args:
            on_date: Calendar date
            instrument: Instrument to look up
            field: Which value to return

        Returns:
            The value, or None when absent
        """

    def get_price(self, on_date: date, instrument: Instrument) -> Optional[Decimal]:
        return self.query(on_date, instrument, MarketField.PRICE)

    def get_dividend(self, on_date: date, instrument: Instrument) -> Optional[Decimal]:
        return self.query(on_date, instrument, MarketField.DIVIDEND_AMOUNT)


class InMemoryMarketData(MarketDataProvider):
    """
    Dictionary-backed provider.

    Also acts as an InstrumentValidator: an instrument is valid once any value
    has been recorded for it.

    Example:
        >>> ko = Instrument("NYSE", "KO")
        >>> data = InMemoryMarketData()
        >>> data.set_price(ko, date(2020, 1, 2), "54.69")
        >>> data.get_price(date(2020, 1, 2), ko)
        Decimal('54.69')
    """

    def __init__(self) -> None:
        self._values: dict[Instrument, dict[date, dict[MarketField, Decimal]]] = {}

    def set_value(self, instrument: Instrument, on_date: date, field: MarketField, value: Any) -> None:
        by_date = self._values.setdefault(instrument, {})
        by_date.setdefault(_normalize_date(on_date), {})[field] = to_decimal(value)

    def set_price(self, instrument: Instrument, on_date: date, price: Any) -> None:
        self.set_value(instrument, on_date, MarketField.PRICE, price)

    def set_dividend(self, instrument: Instrument, on_date: date, amount: Any) -> None:
        self.set_value(instrument, on_date, MarketField.DIVIDEND_AMOUNT, amount)

    def load(
        self,
        prices: Optional[Mapping[Instrument, Mapping[date, Any]]] = None,
        dividends: Optional[Mapping[Instrument, Mapping[date, Any]]] = None,
    ) -> "InMemoryMarketData":
        """Bulk-load nested {instrument: {date: value}} mappings. Returns self."""
        for instrument, series in (prices or {}).items():
            for on_date, value in series.items():
                self.set_price(instrument, on_date, value)
        for instrument, series in (dividends or {}).items():
            for on_date, value in series.items():
                self.set_dividend(instrument, on_date, value)
        return self

    def query(self, on_date: date, instrument: Instrument, field: MarketField) -> Optional[Decimal]:
        by_date = self._values.get(instrument)
        if by_date is None:
            return None
        return by_date.get(_normalize_date(on_date), {}).get(field)

    def is_valid(self, exchange: str, symbol: str) -> bool:
        return Instrument(exchange, symbol) in self._values

    def instruments(self) -> list[Instrument]:
        return list(self._values)
