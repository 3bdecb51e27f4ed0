"""Multi-source rate table merging."""

from __future__ import annotations

from collections.abc import Iterable

from exrates.data.models import Quote, RateTable


def merge_rates(tables: Iterable[RateTable], base_symbol: str = "BTC") -> RateTable:
    """Merge provider tables into one table.

    Starts from the base unit at unit price, then applies each table in
    order. A symbol defined by several tables takes the entry of the last one;
    entries are replaced whole, never combined field by field.

    Args:
        tables: Provider tables, lowest precedence first
        base_symbol: Reference unit that is always present

    Returns:
        A new table; the inputs are left untouched.
    """
    merged: RateTable = {base_symbol: Quote.unit()}
    for table in tables:
        merged.update(table)
    return merged
