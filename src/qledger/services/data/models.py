"""Market data models.

Instrument identity and the field names understood by market data providers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable


class MarketField(str, Enum):
    """Fields a market data provider can be asked for."""

    PRICE = "price"
    DIVIDEND_AMOUNT = "dividend_amount"


class InvalidInstrumentError(ValueError):
    """Raised when a validator rejects an (exchange, symbol) pair."""

    def __init__(self, exchange: str, symbol: str):
        self.exchange = exchange
        self.symbol = symbol
        super().__init__(f"Information for instrument {exchange}:{symbol} is not available")


@runtime_checkable
class InstrumentValidator(Protocol):
    """Anything that can confirm an instrument is tradable."""

    def is_valid(self, exchange: str, symbol: str) -> bool: ...


@dataclass(frozen=True)
class Instrument:
    """
    Tradable identity: exchange code plus symbol.

    Equality and hashing are structural, so two instances with the same
    exchange and symbol are the same ledger key. Plain construction performs
    no lookup; use create() to validate against a data source.

    Attributes:
        exchange: Exchange code (e.g., "NYSE")
        symbol: Ticker symbol (e.g., "KO")

    Example:
        >>> Instrument("NYSE", "KO") == Instrument.parse("NYSE:KO")
        True
    """

    exchange: str
    symbol: str

    def __post_init__(self) -> None:
        if not self.exchange or not self.symbol:
            raise ValueError(f"Instrument needs both exchange and symbol, got {self.exchange!r}:{self.symbol!r}")

    def __str__(self) -> str:
        return f"{self.exchange}:{self.symbol}"

    @classmethod
    def create(cls, exchange: str, symbol: str, validator: InstrumentValidator) -> "Instrument":
        """
        Build an instrument after checking it with the given validator.

        Args:
            exchange: Exchange code
            symbol: Ticker symbol
            validator: Data source that knows which instruments exist

        Returns:
            Validated Instrument

        Raises:
            InvalidInstrumentError: If the validator rejects the pair
        """
        if not validator.is_valid(exchange, symbol):
            raise InvalidInstrumentError(exchange, symbol)
        return cls(exchange=exchange, symbol=symbol)

    @classmethod
    def parse(cls, text: str) -> "Instrument":
        """
        Parse the EXCHANGE:SYMBOL text form.

        Raises:
            ValueError: If text is not of the form EXCHANGE:SYMBOL
        """
        exchange, sep, symbol = text.strip().partition(":")
        if not sep:
            raise ValueError(f"Instrument must be written as EXCHANGE:SYMBOL, got {text!r}")
        return cls(exchange=exchange.strip(), symbol=symbol.strip())
