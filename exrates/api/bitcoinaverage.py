"""BitcoinAverage API client for fiat and altcoin tickers."""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import time
from decimal import Decimal
from typing import Any

import httpx
from pydantic import BaseModel

from exrates.config import settings
from exrates.data.models import Quote, RateKind, RateTable
from exrates.data.symbols import canonicalize_symbol, is_authoritative
from exrates.data.transform import invert_and_format
from exrates.errors import UpstreamStatusError

FIAT_TICKERS_PATH = "/indices/global/ticker/all"
CRYPTO_TICKERS_PATH = "/indices/crypto/ticker/all"


class TickerEntry(BaseModel):
    """Ticker record from either BitcoinAverage index.

    Price fields are left untyped; the feed mixes numbers, strings and blanks.
    """

    ask: Any = None
    bid: Any = None
    last: Any = None
    id: int | None = None

    @property
    def is_blank(self) -> bool:
        """Check if all three price fields are missing or empty."""
        return all(
            v is None or (isinstance(v, str) and not v.strip())
            for v in (self.ask, self.bid, self.last)
        )


def sign_request(pubkey: str, privkey: str, timestamp: int | None = None) -> str:
    """Build the X-signature header value.

    Format is ``{timestamp}.{pubkey}.{hex(HMAC-SHA256(privkey, "{timestamp}.{pubkey}"))}``.
    """
    if timestamp is None:
        timestamp = int(time.time())
    payload = f"{timestamp}.{pubkey}"
    digest = hmac.new(privkey.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()
    return f"{payload}.{digest}"


def format_fiat_tickers(tickers: dict[str, TickerEntry], base_symbol: str) -> RateTable:
    """Re-key ``{BASE}{FIAT}`` tickers to ``FIAT``; prices are used as-is."""
    output: RateTable = {}
    for pair, entry in tickers.items():
        if not pair.startswith(base_symbol) or entry.is_blank:
            continue
        symbol = pair[len(base_symbol):]
        if not symbol:
            continue
        output[symbol] = Quote(
            ask=entry.ask,
            bid=entry.bid,
            last=entry.last,
            kind=RateKind.FIAT,
            id=entry.id,
        )
    return output


def format_crypto_tickers(tickers: dict[str, TickerEntry], base_symbol: str) -> RateTable:
    """Re-key ``{ALT}{BASE}`` tickers to ``ALT`` and invert their prices."""
    output: RateTable = {}
    for pair, entry in tickers.items():
        if not pair.endswith(base_symbol) or entry.is_blank:
            continue
        symbol = canonicalize_symbol(pair[: -len(base_symbol)])
        if not symbol:
            continue
        # Records without an id carry nothing to check against the pins
        if entry.id is not None and not is_authoritative(symbol, entry.id):
            continue
        output[symbol] = Quote(
            ask=invert_and_format(entry.ask),
            bid=invert_and_format(entry.bid),
            last=invert_and_format(entry.last),
            kind=RateKind.CRYPTO,
            id=entry.id,
        )
    return output


class BitcoinAverageClient:
    """Client for the BitcoinAverage ticker indices (signed requests)."""

    name = "bitcoinaverage"

    def __init__(
        self,
        pubkey: str | None = None,
        privkey: str | None = None,
        base_url: str | None = None,
        base_symbol: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.pubkey = pubkey if pubkey is not None else settings.btcavg_pubkey
        self.privkey = privkey if privkey is not None else settings.btcavg_privkey
        self.base_url = base_url or settings.btcavg_base_url
        self.base_symbol = base_symbol or settings.base_symbol
        self.timeout = timeout or settings.http_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Accept": "application/json"},
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")
        return self._client

    async def _get_tickers(self, path: str, params: dict[str, str] | None = None) -> dict[str, TickerEntry]:
        """Fetch one signed ticker index."""
        response = await self.client.get(
            path,
            params=params,
            headers={"X-signature": sign_request(self.pubkey, self.privkey)},
        )
        if response.status_code != 200:
            raise UpstreamStatusError(str(response.url), response.status_code)

        data = response.json(parse_float=Decimal)
        return {
            pair: TickerEntry.model_validate(entry)
            for pair, entry in data.items()
            if isinstance(entry, dict)
        }

    async def get_fiat_tickers(self) -> dict[str, TickerEntry]:
        """Get base-unit prices in every fiat currency."""
        return await self._get_tickers(FIAT_TICKERS_PATH, params={"crypto": self.base_symbol})

    async def get_crypto_tickers(self) -> dict[str, TickerEntry]:
        """Get altcoin prices denominated in the base unit."""
        return await self._get_tickers(CRYPTO_TICKERS_PATH)

    async def fetch(self) -> RateTable:
        """Fetch both indices concurrently and build one provider table.

        Both requests always run to completion. If either fails, the first
        failure (fiat before crypto) is raised and nothing is returned.
        """
        async with self:
            fiat, crypto = await asyncio.gather(
                self.get_fiat_tickers(),
                self.get_crypto_tickers(),
                return_exceptions=True,
            )

        for result in (fiat, crypto):
            if isinstance(result, BaseException):
                raise result

        output = format_fiat_tickers(fiat, self.base_symbol)
        output.update(format_crypto_tickers(crypto, self.base_symbol))
        return output
