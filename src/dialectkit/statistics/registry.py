"""
Named statistics providers and per-product chain configuration.
"""

from __future__ import annotations

import importlib
from typing import Callable, Mapping

from ..config import statistics_provider_names
from ..dialects.base import Dialect
from ..errors import ConfigurationError
from .base import StatisticsChain, StatisticsProvider
from .metadata import MetadataStatisticsProvider
from .sql import SqlStatisticsProvider

PROVIDERS: dict[str, Callable[[], StatisticsProvider]] = {
    "metadata": MetadataStatisticsProvider,
    "sql": SqlStatisticsProvider,
}

# Cheap metadata first, COUNT queries as the definitive fallback.
DEFAULT_PROVIDERS: tuple[str, ...] = ("metadata", "sql")


def provider_for_name(name: str) -> StatisticsProvider:
    """
    Instantiate a provider by registered name or ``package.module:ClassName`` path.
    """

    factory = PROVIDERS.get(name.lower())
    if factory is not None:
        return factory()
    if ":" not in name:
        raise ConfigurationError(
            f"Unknown statistics provider {name!r}; expected one of {sorted(PROVIDERS)} "
            "or a 'module:Class' path"
        )
    module_name, _, attribute = name.partition(":")
    try:
        module = importlib.import_module(module_name)
        factory = getattr(module, attribute)
    except (ImportError, AttributeError) as exc:
        raise ConfigurationError(f"Cannot load statistics provider {name!r}") from exc
    return factory()


def statistics_chain_for(dialect: Dialect, environ: Mapping[str, str] | None = None) -> StatisticsChain:
    names = statistics_provider_names(dialect.product.name, environ) or list(DEFAULT_PROVIDERS)
    return StatisticsChain([provider_for_name(name) for name in names])
