"""Exception types raised by the aggregation pipeline."""

from __future__ import annotations


class ExratesError(Exception):
    """Base class for pipeline errors."""


class UpstreamStatusError(ExratesError):
    """An upstream provider answered with a non-200 status."""

    def __init__(self, url: str, status_code: int):
        self.url = url
        self.status_code = status_code
        super().__init__(f"Upstream returned HTTP {status_code}: {url}")


class InvalidPriceError(ExratesError, ValueError):
    """A price field could not be read as a decimal number."""


class MissingRequiredSymbolError(ExratesError):
    """The merged table lacks a symbol every snapshot must carry."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Missing required symbol: {symbol}")


class WriterError(ExratesError):
    """A snapshot sink failed to store the serialized rates."""
