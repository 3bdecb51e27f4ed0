"""API clients for exchange-rate providers."""

from .bitcoinaverage import BitcoinAverageClient, TickerEntry, sign_request
from .coinmarketcap import CoinMarketCapClient, Listing

__all__ = [
    "BitcoinAverageClient",
    "TickerEntry",
    "sign_request",
    "CoinMarketCapClient",
    "Listing",
]
