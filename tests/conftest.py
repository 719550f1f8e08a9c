"""Shared fixtures for all tests."""

import logging
from datetime import date

import pytest
import structlog

from qledger.services.data.models import Instrument
from qledger.services.data.provider import InMemoryMarketData
from qledger.system.log_system import LoggerFactory


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any LoggerFactory.configure() done by a test."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    structlog.reset_defaults()
    LoggerFactory._config = None
    LoggerFactory._configured = False


@pytest.fixture
def ko() -> Instrument:
    return Instrument("NYSE", "KO")


@pytest.fixture
def pep() -> Instrument:
    return Instrument("NYSE", "PEP")


@pytest.fixture
def unknown() -> Instrument:
    return Instrument("NYSE", "XYZ")


@pytest.fixture
def market(ko: Instrument, pep: Instrument) -> InMemoryMarketData:
    """KO at 25 and PEP at 40 on 2020-01-02; on 2020-03-13 KO pays 0.41 and PEP 0."""
    trade_day, dividend_day = date(2020, 1, 2), date(2020, 3, 13)
    data = InMemoryMarketData()
    data.set_price(ko, trade_day, "25")
    data.set_price(pep, trade_day, "40")
    data.set_price(ko, dividend_day, "24.50")
    data.set_dividend(ko, dividend_day, "0.41")
    data.set_dividend(pep, dividend_day, "0")
    return data

