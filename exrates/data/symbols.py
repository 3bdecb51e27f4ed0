"""Ticker canonicalization and collision resolution tables."""

from __future__ import annotations

import json
from types import MappingProxyType

# Symbols some sources use for coins we list under a different ticker
ALT_SYMBOLS_TO_CANONICAL = MappingProxyType({
    "MIOTA": "IOTA",
})

# Tickers shared by several coins, pinned to one coin by its CoinMarketCap id
PINNED_SYMBOL_IDS = MappingProxyType({
    "BTC": 1,  # Bitcoin
    "LTC": 2,  # Litecoin
    "NXT": 66,  # Nxt
    "DOGE": 74,  # Dogecoin
    "DASH": 131,  # Dash
    "XMR": 328,  # Monero
    "ETH": 1027,  # Ethereum
    "ZEC": 1437,  # Zcash
    "BCH": 1831,  # Bitcoin Cash
    "BTG": 2083,  # Bitcoin Gold
    "CMT": 2246,  # CyberMiles
    "KNC": 1982,  # Kyber Network
    "BTM": 1866,  # Bytom
    "ICN": 1408,  # Iconomi
    "GTC": 2336,  # Game.com
    "BLZ": 2505,  # Bluzelle
    "HOT": 2682,  # Holo
    "RCN": 2096,  # Ripio Credit Network
    "FAIR": 224,  # FairCoin
    "EDR": 2835,  # Endor Protocol
    "CPC": 2482,  # CPChain
    "QBT": 2242,  # Qbao
    "KEY": 2398,  # Selfkey
    "RED": 2771,  # RED
    "HMC": 2484,  # Hi Mutual Society
    "NET": 1811,  # Nimiq Exchange Token
    "LNC": 2677,  # Linker Coin
    "CAN": 2343,  # CanYaCoin
    "BET": 1771,  # DAO.Casino
    "SPD": 2616,  # Stipend
    "CAT": 2334,  # BitClave
    "GCC": 1531,  # Global Cryptocurrency
    "PUT": 2419,  # Profile Utility Token
    "MAG": 2218,  # Magnet
    "CRC": 2664,  # CryCash
    "ACC": 2225,  # Accelerator Network
    "PXC": 35,  # Phoenixcoin
    "ETT": 1714,  # EncryptoTel [WAVES]
    "XIN": 2349,  # Mixin
    "HERO": 1805,  # Sovereign Hero
    "HNC": 1004,  # Helleniccoin
    "ENT": 1474,  # Eternity
    "LBTC": 1825,  # LiteBitcoin
    "CMS": 2262,  # COMSA [ETH]
})

# Listing entries we never publish (tokens squatting on fiat tickers)
BANNED_SYMBOLS = frozenset({
    "USD",
})

_PINNED_IDS_JSON = json.dumps(
    dict(PINNED_SYMBOL_IDS), sort_keys=True, separators=(",", ":")
).encode("utf-8")


def canonicalize_symbol(symbol: str) -> str:
    """Return the canonical ticker for a symbol that may be an alias."""
    return ALT_SYMBOLS_TO_CANONICAL.get(symbol, symbol)


def is_authoritative(symbol: str, source_id: int | None) -> bool:
    """Check whether a record's source id is the pinned one for its symbol.

    Symbols without a pinned id can't collide, so any id is accepted.
    """
    pinned_id = PINNED_SYMBOL_IDS.get(symbol)
    if pinned_id is None:
        return True
    return pinned_id == source_id


def is_banned(symbol: str, banned: frozenset[str] | None = None) -> bool:
    """Check a canonical symbol against the listing denylist."""
    return symbol in (BANNED_SYMBOLS if banned is None else banned)


def pinned_ids_json() -> bytes:
    """Get the pinned symbol ids as the published whitelist JSON."""
    return _PINNED_IDS_JSON
