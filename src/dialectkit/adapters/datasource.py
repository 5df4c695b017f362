"""
Data source lending connected adapters to one call at a time.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Generator

from ..config import ConnectionConfig
from ..utils import get_logger
from .base import AdapterConfigurationError, DatabaseAdapter
from .mysql import MySQLAdapter
from .postgres import PostgresAdapter
from .sqlite import SQLiteAdapter

AdapterFactory = Callable[[], DatabaseAdapter]

ADAPTERS_BY_SCHEME: dict[str, AdapterFactory] = {
    "sqlite": SQLiteAdapter,
    "postgres": PostgresAdapter,
    "postgresql": PostgresAdapter,
    "mysql": MySQLAdapter,
    "mariadb": MySQLAdapter,
}


def adapter_factory_for(config: ConnectionConfig) -> AdapterFactory:
    scheme = config.scheme.split("+", 1)[0]
    try:
        return ADAPTERS_BY_SCHEME[scheme]
    except KeyError:
        raise AdapterConfigurationError(
            f"No adapter registered for scheme {scheme!r} ({config.redacted_dsn()})"
        ) from None


class DataSource:
    """
    Opens a fresh connection per :meth:`acquire` and closes it on the way out.

    Connections are not thread safe; each borrower owns its adapter exclusively
    until the block exits.
    """

    def __init__(self, config: ConnectionConfig, adapter_factory: AdapterFactory | None = None) -> None:
        self.config = config
        self.adapter_factory = adapter_factory or adapter_factory_for(config)
        self.logger = get_logger("adapters.datasource")

    @classmethod
    def from_dsn(cls, dsn: str, **kwargs: Any) -> "DataSource":
        factory = kwargs.pop("adapter_factory", None)
        return cls(ConnectionConfig.from_dsn(dsn, **kwargs), factory)

    @classmethod
    def from_env(cls, env_var: str, **kwargs: Any) -> "DataSource":
        factory = kwargs.pop("adapter_factory", None)
        return cls(ConnectionConfig.from_env(env_var, **kwargs), factory)

    @contextmanager
    def acquire(self) -> Generator[DatabaseAdapter, None, None]:
        adapter = self.adapter_factory()
        adapter.connect(self.config)
        try:
            yield adapter
        finally:
            adapter.close()

    def __repr__(self) -> str:
        return f"DataSource({self.config.descriptive_label()})"
