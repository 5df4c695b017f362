"""
PostgreSQL database adapter implementation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Sequence

from ..config import ConnectionConfig, resolve_slow_query_ms
from ..utils import get_logger, time_call
from .base import (
    AdapterConfigurationError,
    AdapterConnectionError,
    DatabaseAdapter,
    IndexInfo,
    IndexType,
    close_quietly,
    redact_params,
    validate_format_params,
)

_TABLE_STATISTIC_SQL = """
SELECT c.reltuples
FROM pg_catalog.pg_class c
JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
WHERE c.relname = %s AND n.nspname = COALESCE(%s, current_schema())
"""

_INDEX_SQL = """
SELECT ci.relname, NOT i.indisunique, ci.reltuples
FROM pg_catalog.pg_index i
JOIN pg_catalog.pg_class ct ON ct.oid = i.indrelid
JOIN pg_catalog.pg_class ci ON ci.oid = i.indexrelid
JOIN pg_catalog.pg_namespace n ON n.oid = ct.relnamespace
WHERE ct.relname = %s AND n.nspname = COALESCE(%s, current_schema())
ORDER BY ci.relname
"""


def _load_driver():
    try:
        import psycopg

        return psycopg
    except ImportError:
        return None


@dataclass
class PostgresConnectionState:
    connection: Any
    config: ConnectionConfig
    driver: Any


class PostgresAdapter(DatabaseAdapter):
    """
    Adapter wrapping the psycopg PostgreSQL driver.
    """

    def __init__(self, slow_query_ms: int | None = None) -> None:
        self._state: PostgresConnectionState | None = None
        self.logger = get_logger("adapters.postgres")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)

    def connect(self, config: ConnectionConfig) -> Any:
        driver = _load_driver()
        if driver is None:
            raise AdapterConfigurationError("psycopg is required to use PostgresAdapter.")

        options = dict(config.options or {})
        if config.timeout and "connect_timeout" not in options:
            options["connect_timeout"] = int(config.timeout)

        self.logger.info(
            "Connecting to PostgreSQL %s (autocommit=%s)",
            config.descriptive_label(),
            config.autocommit,
        )

        # libpq only understands postgresql:// URLs; query parameters already
        # live in ``options``.
        scheme, sep, rest = config.url.partition("://")
        url = f"postgresql://{rest.split('?', 1)[0]}" if sep and scheme.startswith("postgres") else config.url
        try:
            connection = driver.connect(url, **options)
        except Exception as exc:
            raise AdapterConnectionError("Failed to connect to PostgreSQL.") from exc
        connection.autocommit = bool(config.autocommit)

        self._state = PostgresConnectionState(connection, config, driver)
        return connection

    def close(self) -> None:
        if self._state:
            try:
                self._state.connection.close()
            finally:
                self._state = None

    def _ensure_connection(self):
        if not self._state:
            raise AdapterConnectionError("PostgresAdapter is not connected.")
        conn = self._state.connection
        if getattr(conn, "closed", False):
            self.logger.warning("PostgreSQL connection closed; reconnecting.")
            conn = self.connect(self._state.config)
        return conn

    def execute(self, sql: str, params: Sequence[Any] | None = None):
        connection = self._ensure_connection()
        params = params or ()
        validate_format_params(sql, params)
        cursor = connection.cursor()
        try:
            with time_call(
                "postgres.execute",
                self.logger,
                sql=sql,
                params=redact_params(params),
                threshold_ms=self.slow_query_ms,
            ):
                cursor.execute(sql, params or None)
        except BaseException:
            close_quietly(cursor, self.logger)
            raise
        return cursor

    def cancel(self) -> None:
        if self._state:
            self._state.connection.cancel()

    def product_name(self) -> str:
        return "PostgreSQL"

    def product_version(self) -> str:
        cursor = self.execute("SHOW server_version")
        try:
            return cursor.fetchone()[0]
        finally:
            cursor.close()

    def identifier_quote_string(self) -> str | None:
        return '"'

    def index_info(self, catalog: str | None, schema: str | None, table: str) -> Iterator[IndexInfo]:
        cursor = self.execute(_TABLE_STATISTIC_SQL, (table, schema))
        try:
            row = cursor.fetchone()
        finally:
            cursor.close()
        # reltuples is -1 until the table has been vacuumed or analyzed.
        if row is not None and row[0] is not None and row[0] >= 0:
            yield IndexInfo(None, False, IndexType.TABLE_STATISTIC, int(row[0]))

        cursor = self.execute(_INDEX_SQL, (table, schema))
        try:
            for name, non_unique, reltuples in cursor:
                yield IndexInfo(name, bool(non_unique), IndexType.INDEX, max(int(reltuples), 0))
        finally:
            cursor.close()
