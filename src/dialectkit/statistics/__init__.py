"""
Cardinality estimation through an ordered chain of providers.
"""

from .base import StatisticsChain, StatisticsProvider
from .metadata import MetadataStatisticsProvider
from .registry import DEFAULT_PROVIDERS, PROVIDERS, provider_for_name, statistics_chain_for
from .sql import SqlStatisticsProvider

__all__ = [
    "StatisticsChain",
    "StatisticsProvider",
    "MetadataStatisticsProvider",
    "SqlStatisticsProvider",
    "DEFAULT_PROVIDERS",
    "PROVIDERS",
    "provider_for_name",
    "statistics_chain_for",
]
