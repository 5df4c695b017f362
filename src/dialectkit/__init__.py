"""
dialectkit public package initialization.

Dialect capability detection and cardinality estimation for relational
backends.
"""

from .adapters import DataSource  # noqa: F401
from .dialects import (
    DatabaseProduct,
    Datatype,
    Dialect,
    DialectCapabilities,
    detect_dialect,
    detect_dialect_for,
    dialect_for,
)  # noqa: F401
from .errors import (
    ConfigurationError,
    DetectionError,
    DialectKitError,
    ExecutionCancelledError,
    StatisticsError,
)  # noqa: F401
from .execution import Execution  # noqa: F401
from .statistics import (
    MetadataStatisticsProvider,
    SqlStatisticsProvider,
    StatisticsChain,
    statistics_chain_for,
)  # noqa: F401

__all__ = [
    "DataSource",
    "DatabaseProduct",
    "Datatype",
    "Dialect",
    "DialectCapabilities",
    "detect_dialect",
    "detect_dialect_for",
    "dialect_for",
    "Execution",
    "StatisticsChain",
    "MetadataStatisticsProvider",
    "SqlStatisticsProvider",
    "statistics_chain_for",
    "DialectKitError",
    "ConfigurationError",
    "DetectionError",
    "StatisticsError",
    "ExecutionCancelledError",
]
