"""Market data: instrument identity and price/dividend providers."""

from qledger.services.data.csv_provider import CsvMarketData
from qledger.services.data.models import Instrument, InstrumentValidator, InvalidInstrumentError, MarketField
from qledger.services.data.provider import InMemoryMarketData, MarketDataProvider

__all__ = [
    "CsvMarketData",
    "InMemoryMarketData",
    "Instrument",
    "InstrumentValidator",
    "InvalidInstrumentError",
    "MarketDataProvider",
    "MarketField",
]
