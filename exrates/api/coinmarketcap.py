"""CoinMarketCap API client for the global coin listing."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import httpx
from pydantic import BaseModel, Field

from exrates.config import settings
from exrates.data.models import Quote, RateKind, RateTable
from exrates.data.symbols import BANNED_SYMBOLS, canonicalize_symbol, is_authoritative, is_banned
from exrates.data.transform import invert_and_format, parse_price
from exrates.errors import UpstreamStatusError

FIRST_START = 1


class ListingPrice(BaseModel):
    """Price of a listed coin in one convert currency."""

    price: Any = None


class Listing(BaseModel):
    """Coin record from the listings endpoint."""

    id: int
    symbol: str
    name: str | None = None
    quote: dict[str, ListingPrice] = Field(default_factory=dict)

    def price_in(self, symbol: str) -> Any:
        """Get the raw price in the given convert currency (None if absent)."""
        converted = self.quote.get(symbol)
        return converted.price if converted else None


class ListingsPage(BaseModel):
    """One page of the listings endpoint."""

    data: list[Listing] = Field(default_factory=list)


def format_listings(
    listings: list[Listing],
    base_symbol: str,
    banned: frozenset[str] = BANNED_SYMBOLS,
) -> RateTable:
    """Turn listing records priced in the base unit into unit-per-base quotes."""
    output: RateTable = {}
    for listing in listings:
        symbol = canonicalize_symbol(listing.symbol)

        if is_banned(symbol, banned):
            continue
        if not is_authoritative(symbol, listing.id):
            continue

        raw_price = listing.price_in(base_symbol)
        if parse_price(raw_price) is None:
            continue

        price = invert_and_format(raw_price)
        output[symbol] = Quote(ask=price, bid=price, last=price, kind=RateKind.CRYPTO)
    return output


class CoinMarketCapClient:
    """Client for the CoinMarketCap listings API (paginated)."""

    name = "coinmarketcap"

    def __init__(
        self,
        api_key: str | None = None,
        env: str | None = None,
        base_symbol: str | None = None,
        page_size: int | None = None,
        max_pages: int | None = None,
        banned_symbols: frozenset[str] | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.cmc_api_key
        self.endpoint = settings.cmc_endpoint_template.format(env=env or settings.cmc_env)
        self.base_symbol = base_symbol or settings.base_symbol
        self.page_size = page_size or settings.cmc_page_size
        self.max_pages = max_pages or settings.cmc_max_pages
        self.banned_symbols = BANNED_SYMBOLS if banned_symbols is None else banned_symbols
        self.timeout = timeout or settings.http_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            headers={
                "Accept": "application/json",
                "X-CMC_PRO_API_KEY": self.api_key,
            },
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

    async def get_listings(self, start: int = FIRST_START, limit: int | None = None) -> list[Listing]:
        """Fetch one page of listings priced in the base unit."""
        params = {
            "start": start,
            "limit": limit or self.page_size,
            "convert": self.base_symbol,
        }

        response = await self.client.get(self.endpoint, params=params)
        if response.status_code != 200:
            raise UpstreamStatusError(str(response.url), response.status_code)

        page = ListingsPage.model_validate(response.json(parse_float=Decimal))
        return page.data

    async def get_all_listings(self) -> list[Listing]:
        """Fetch all listings with automatic pagination.

        Stops on the first short page, or after ``max_pages`` requests when
        the upstream keeps returning full pages.
        """
        all_listings: list[Listing] = []
        start = FIRST_START

        for _ in range(self.max_pages):
            listings = await self.get_listings(start=start, limit=self.page_size)
            all_listings.extend(listings)

            if len(listings) < self.page_size:
                break

            start += self.page_size

        return all_listings

    async def fetch(self) -> RateTable:
        """Fetch every listing page and build one provider table."""
        async with self:
            listings = await self.get_all_listings()

        return format_listings(listings, self.base_symbol, self.banned_symbols)
