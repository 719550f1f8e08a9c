"""Unit tests for Instrument identity and validated construction."""

from unittest.mock import Mock

import pytest

from qledger.services.data.models import Instrument, InstrumentValidator, InvalidInstrumentError


class TestInstrumentIdentity:
    """Tests for structural equality and the text form."""

    def test_equal_fields_are_same_key(self):
        first = Instrument("NYSE", "KO")
        second = Instrument("NYSE", "KO")

        assert first == second
        assert hash(first) == hash(second)
        assert {first: 1}[second] == 1

    def test_exchange_is_part_of_identity(self):
        assert Instrument("NYSE", "KO") != Instrument("LSE", "KO")

    def test_instrument_is_immutable(self):
        instrument = Instrument("NYSE", "KO")

        with pytest.raises(AttributeError):
            instrument.symbol = "PEP"  # type: ignore[misc]

    def test_str_and_parse_agree(self):
        instrument = Instrument.parse(" NYSE : KO ")

        assert instrument == Instrument("NYSE", "KO")
        assert str(instrument) == "NYSE:KO"

    @pytest.mark.parametrize("text", ["KO", "", ":KO", "NYSE:"])
    def test_parse_rejects_malformed_text(self, text):
        with pytest.raises(ValueError):
            Instrument.parse(text)


class TestInstrumentCreate:
    """Tests for Instrument.create with an injected validator."""

    def test_create_consults_validator_once(self):
        validator = Mock(spec=InstrumentValidator)
        validator.is_valid.return_value = True

        instrument = Instrument.create("NYSE", "KO", validator)

        assert instrument == Instrument("NYSE", "KO")
        validator.is_valid.assert_called_once_with("NYSE", "KO")

    def test_create_rejects_unknown_instrument(self):
        validator = Mock(spec=InstrumentValidator)
        validator.is_valid.return_value = False

        with pytest.raises(InvalidInstrumentError) as exc_info:
            Instrument.create("NYSE", "XYZ", validator)

        assert exc_info.value.symbol == "XYZ"
        assert isinstance(exc_info.value, ValueError)

    def test_in_memory_data_is_a_validator(self, market):
        assert isinstance(market, InstrumentValidator)
        assert Instrument.create("NYSE", "KO", market) == Instrument("NYSE", "KO")
