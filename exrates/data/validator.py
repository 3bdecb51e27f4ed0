"""Snapshot completeness validation."""

from __future__ import annotations

from collections.abc import Iterable

from exrates.data.models import RateTable
from exrates.errors import MissingRequiredSymbolError


def find_missing_symbols(rates: RateTable, required_symbols: Iterable[str]) -> list[str]:
    """List required symbols absent from the table, in the order given."""
    return [symbol for symbol in required_symbols if symbol not in rates]


def validate_rates(rates: RateTable, required_symbols: Iterable[str]) -> None:
    """Ensure a merged table carries every required symbol.

    Raises:
        MissingRequiredSymbolError: Naming the first missing symbol.
    """
    missing = find_missing_symbols(rates, required_symbols)
    if missing:
        raise MissingRequiredSymbolError(missing[0])
