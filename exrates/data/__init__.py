"""Data layer: rate models, normalization, merging and aggregation."""

from .models import Quote, RateKind, RateTable, load_rates, serialize_rates
from .merge import merge_rates
from .validator import validate_rates
from .aggregator import FetcherHealth, RateAggregator

__all__ = [
    "Quote",
    "RateKind",
    "RateTable",
    "load_rates",
    "serialize_rates",
    "merge_rates",
    "validate_rates",
    "FetcherHealth",
    "RateAggregator",
]
