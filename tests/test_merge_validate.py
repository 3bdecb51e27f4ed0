"""
Tests for rate models, merging and validation.

============================================================
TEST SCENARIOS
============================================================
1. Quotes normalize prices and serialize to the wire shape
2. Later tables override earlier ones, entries replaced whole
3. Inputs are never mutated
4. Missing required symbols are named
============================================================
"""

import json
from decimal import Decimal

import pytest
from pydantic import ValidationError

from exrates.data.merge import merge_rates
from exrates.data.models import Quote, RateKind, load_rates, serialize_rates
from exrates.data.validator import find_missing_symbols, validate_rates
from exrates.errors import MissingRequiredSymbolError


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def table_a():
    return {
        "ETH": Quote(ask="30", bid="31", last="32", kind=RateKind.CRYPTO),
        "USD": Quote(ask="1", bid="2", last="3", kind=RateKind.FIAT),
    }


@pytest.fixture
def table_b():
    return {
        "ETH": Quote(ask="40", bid="", last="42", kind=RateKind.CRYPTO),
    }


# ============================================================
# MODELS
# ============================================================

class TestQuote:

    def test_coerces_numbers(self):
        quote = Quote(ask=Decimal("6500.10"), bid=3, last=None, kind=RateKind.FIAT)
        assert quote.ask == "6500.10"
        assert quote.bid == "3"
        assert quote.last == ""

    def test_rejects_garbage(self):
        with pytest.raises(ValidationError):
            Quote(ask="abc", kind=RateKind.FIAT)

    def test_type_alias(self):
        quote = Quote.model_validate({"ask": "1", "bid": "1", "last": "1", "type": "fiat"})
        assert quote.kind is RateKind.FIAT

    def test_frozen(self):
        quote = Quote.unit()
        with pytest.raises(ValidationError):
            quote.ask = "2"

    def test_wire_shape(self):
        assert Quote.unit().to_wire() == {"ask": "1", "bid": "1", "last": "1", "type": "crypto"}
        with_id = Quote(ask="2", bid="2", last="2", kind=RateKind.CRYPTO, id=2225)
        assert with_id.to_wire()["id"] == 2225


def test_serialize_is_deterministic(table_a):
    reordered = dict(reversed(list(table_a.items())))
    assert serialize_rates(table_a) == serialize_rates(reordered)

    payload = json.loads(serialize_rates(table_a))
    assert list(payload) == ["ETH", "USD"]
    assert payload["USD"] == {"ask": "1", "bid": "2", "last": "3", "type": "fiat"}


def test_load_rates_round_trip(table_a):
    assert load_rates(serialize_rates(table_a)) == table_a


# ============================================================
# MERGE
# ============================================================

class TestMergeRates:

    def test_empty_yields_base_unit(self):
        assert merge_rates([]) == {"BTC": Quote.unit()}

    def test_later_table_wins(self, table_a, table_b):
        merged = merge_rates([table_a, table_b])
        assert merged["ETH"] == table_b["ETH"]
        assert merged["ETH"].bid == ""
        assert merged["USD"] == table_a["USD"]
        assert merged["BTC"] == Quote.unit()

    def test_order_sensitive(self, table_a, table_b):
        assert merge_rates([table_b, table_a])["ETH"] == table_a["ETH"]

    def test_provider_may_override_base(self):
        custom = Quote(ask="1", bid="1", last="1", kind=RateKind.CRYPTO, id=1)
        merged = merge_rates([{"BTC": custom}])
        assert merged["BTC"] == custom

    def test_custom_base_symbol(self):
        merged = merge_rates([], base_symbol="ETH")
        assert merged == {"ETH": Quote.unit()}

    def test_inputs_not_mutated(self, table_a, table_b):
        before_a, before_b = dict(table_a), dict(table_b)
        merged = merge_rates([table_a, table_b])
        assert table_a == before_a
        assert table_b == before_b
        assert merged is not table_a


# ============================================================
# VALIDATION
# ============================================================

class TestValidateRates:

    def test_passes_when_present(self, table_a):
        assert validate_rates(merge_rates([table_a]), ["BTC", "USD", "ETH"]) is None

    def test_names_first_missing_symbol(self, table_a):
        with pytest.raises(MissingRequiredSymbolError) as exc_info:
            validate_rates(merge_rates([table_a]), ["BTC", "EUR", "LTC"])
        assert exc_info.value.symbol == "EUR"
        assert "Missing required symbol: EUR" in str(exc_info.value)

    def test_find_missing_symbols(self, table_a):
        assert find_missing_symbols(table_a, ["EUR", "USD", "LTC"]) == ["EUR", "LTC"]
