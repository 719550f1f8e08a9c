"""CSV-backed market data provider.

Reads daily bars and a dividend calendar laid out per exchange:

    <root>/<EXCHANGE>/<SYMBOL>.csv
    <root>/<EXCHANGE>/dividends_calendar.json

CSV Format (per symbol):
    Date,Open,High,Low,Close,Adj Close,Volume
    2020-01-02,74.06,75.15,73.80,75.09,72.47,135480400

Dividends JSON Format (dividends_calendar.json):
    {
        "AAPL": [
            {"date": "2020-02-07", "amount": 0.77},
            {"date": "2020-05-08", "amount": 0.82}
        ]
    }
"""

import json
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

from qledger.services.data.models import Instrument, MarketField
from qledger.services.data.provider import MarketDataProvider, _normalize_date, to_decimal
from qledger.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()


class CsvMarketData(MarketDataProvider):
    """
    Lazy, cached provider over a directory of per-symbol CSV files.

    Each instrument's CSV is read once, on first query. Exchanges' dividend
    calendars are likewise read once.

    Attributes:
        root_path: Directory holding one sub-directory per exchange
        price_column: CSV column used as the trade price
        dividends_file: Dividend calendar filename inside each exchange directory

    Example:
        >>> data = CsvMarketData("data/equities")
        >>> data.get_price(date(2020, 1, 2), Instrument("NASDAQ", "AAPL"))
        Decimal('75.09')
    """

    def __init__(
        self,
        root_path: str | Path,
        price_column: str = "Close",
        dividends_file: str = "dividends_calendar.json",
    ):
        self.root_path = Path(root_path)
        self.price_column = price_column
        self.dividends_file = dividends_file

        self._prices: Dict[Instrument, Dict[date, Decimal]] = {}
        self._dividends: Dict[str, Dict[str, Dict[date, Decimal]]] = {}

        logger.debug(
            "csv_market_data.initialized",
            root_path=str(self.root_path),
            price_column=price_column,
        )

    def csv_path(self, instrument: Instrument) -> Path:
        return self.root_path / instrument.exchange / f"{instrument.symbol}.csv"

    def is_valid(self, exchange: str, symbol: str) -> bool:
        return self.csv_path(Instrument(exchange, symbol)).exists()

    def query(self, on_date: date, instrument: Instrument, field: MarketField) -> Optional[Decimal]:
        on_date = _normalize_date(on_date)
        if field == MarketField.PRICE:
            return self._load_prices(instrument).get(on_date)
        if field == MarketField.DIVIDEND_AMOUNT:
            return self._load_dividends(instrument.exchange).get(instrument.symbol, {}).get(on_date)
        raise ValueError(f"Unsupported market field: {field}")

    def _load_prices(self, instrument: Instrument) -> Dict[date, Decimal]:
        if instrument in self._prices:
            return self._prices[instrument]

        path = self.csv_path(instrument)
        if not path.exists():
            logger.debug("csv_market_data.file_missing", instrument=str(instrument), path=str(path))
            self._prices[instrument] = {}
            return self._prices[instrument]

        # Keep prices as text so Decimal sees exactly what the file says
        frame = pd.read_csv(path, dtype={self.price_column: str})
        if "Date" not in frame.columns or self.price_column not in frame.columns:
            raise ValueError(f"{path} must have 'Date' and '{self.price_column}' columns, got {list(frame.columns)}")

        frame = frame.dropna(subset=["Date", self.price_column])
        dates = pd.to_datetime(frame["Date"]).dt.date
        prices = {d: to_decimal(p.strip()) for d, p in zip(dates, frame[self.price_column])}
        self._prices[instrument] = prices

        logger.debug(
            "csv_market_data.loaded",
            instrument=str(instrument),
            rows=len(prices),
        )
        return prices

    def _load_dividends(self, exchange: str) -> Dict[str, Dict[date, Decimal]]:
        if exchange in self._dividends:
            return self._dividends[exchange]

        calendar: Dict[str, Dict[date, Decimal]] = {}
        path = self.root_path / exchange / self.dividends_file
        if path.exists():
            with path.open("r") as f:
                raw = json.load(f)
            for symbol, events in raw.items():
                by_date = calendar.setdefault(symbol, {})
                for event in events:
                    event_date = date.fromisoformat(event["date"])
                    # Two distributions on one date pay out together
                    by_date[event_date] = by_date.get(event_date, Decimal("0")) + to_decimal(event["amount"])

        self._dividends[exchange] = calendar
        return calendar
