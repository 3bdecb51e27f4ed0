"""Rate table data model and snapshot wire format."""

from __future__ import annotations

import json
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from exrates.data.transform import parse_price


class RateKind(str, Enum):
    """Kind of currency a rate describes."""

    FIAT = "fiat"
    CRYPTO = "crypto"


class Quote(BaseModel):
    """One price observation for a symbol, expressed against the base unit.

    Prices are canonical decimal strings; an empty string marks a field the
    provider did not supply.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ask: str = ""
    bid: str = ""
    last: str = ""
    kind: RateKind = Field(alias="type")
    id: int | None = None

    @field_validator("ask", "bid", "last", mode="before")
    @classmethod
    def coerce_price(cls, v: Any) -> str:
        """Normalize numbers and numeric strings to decimal strings."""
        if isinstance(v, str):
            text = v.strip()
            if text:
                parse_price(text)
            return text
        parsed = parse_price(v)
        if parsed is None:
            return ""
        return format(parsed, "f")

    @classmethod
    def unit(cls) -> "Quote":
        """Get the quote of the base unit against itself."""
        return cls(ask="1", bid="1", last="1", kind=RateKind.CRYPTO)

    def to_wire(self) -> dict[str, Any]:
        """Convert to the snapshot JSON shape."""
        data: dict[str, Any] = {
            "ask": self.ask,
            "bid": self.bid,
            "last": self.last,
            "type": self.kind.value,
        }
        if self.id is not None:
            data["id"] = self.id
        return data


# Canonical symbol -> quote
RateTable = dict[str, Quote]


def serialize_rates(rates: RateTable) -> bytes:
    """Serialize a rate table to compact, key-sorted JSON bytes."""
    payload = {symbol: quote.to_wire() for symbol, quote in rates.items()}
    return json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")


def load_rates(data: bytes | str) -> RateTable:
    """Parse snapshot JSON back into a rate table."""
    payload = json.loads(data, parse_float=Decimal)
    return {symbol: Quote.model_validate(entry) for symbol, entry in payload.items()}
