"""
Database adapter interfaces and implementations.
"""

from .base import (
    AdapterConfigurationError,
    AdapterConnectionError,
    AdapterError,
    AdapterExecutionError,
    DatabaseAdapter,
    IndexInfo,
    IndexType,
)
from ..config import ConnectionConfig
from .datasource import DataSource, adapter_factory_for
from .mysql import MySQLAdapter
from .postgres import PostgresAdapter
from .sqlite import SQLiteAdapter

__all__ = [
    "ConnectionConfig",
    "DatabaseAdapter",
    "DataSource",
    "IndexInfo",
    "IndexType",
    "AdapterError",
    "AdapterConfigurationError",
    "AdapterConnectionError",
    "AdapterExecutionError",
    "SQLiteAdapter",
    "PostgresAdapter",
    "MySQLAdapter",
    "adapter_factory_for",
]
