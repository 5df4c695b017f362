"""
MySQL database adapter implementation.
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

_TABLE_STATISTIC_SQL = (
    "SELECT TABLE_ROWS FROM information_schema.TABLES "
    "WHERE TABLE_SCHEMA = COALESCE(%s, DATABASE()) AND TABLE_NAME = %s"
)

_INDEX_SQL = (
    "SELECT INDEX_NAME, MAX(NON_UNIQUE), MAX(CARDINALITY) FROM information_schema.STATISTICS "
    "WHERE TABLE_SCHEMA = COALESCE(%s, DATABASE()) AND TABLE_NAME = %s "
    "GROUP BY INDEX_NAME ORDER BY INDEX_NAME"
)


def _load_driver():
    try:
        import pymysql  # type: ignore[import-untyped]

        return pymysql
    except ImportError:
        try:
            import MySQLdb

            return MySQLdb
        except ImportError:
            return None


@dataclass
class MySQLConnectionState:
    connection: Any
    config: ConnectionConfig
    driver: Any
    connect_kwargs: dict[str, Any]


class MySQLAdapter(DatabaseAdapter):
    """
    Adapter wrapping a MySQL DB-API driver (PyMySQL or mysqlclient).

    Serves MariaDB and Infobright as well; they share the driver and are
    told apart by dialect detection.
    """

    def __init__(self, slow_query_ms: int | None = None) -> None:
        self._state: MySQLConnectionState | None = None
        self.logger = get_logger("adapters.mysql")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)

    def connect(self, config: ConnectionConfig) -> Any:
        driver = _load_driver()
        if driver is None:
            raise AdapterConfigurationError(
                "PyMySQL or mysqlclient is required to use MySQLAdapter."
            )
        if not config.dsn:
            raise AdapterConfigurationError(
                "ConnectionConfig must be built from a DSN for MySQL connections."
            )

        options = dict(config.options or {})
        if config.timeout and "connect_timeout" not in options:
            options["connect_timeout"] = int(config.timeout)

        self.logger.info(
            "Connecting to MySQL %s (autocommit=%s)",
            config.descriptive_label(),
            config.autocommit,
        )

        dsn = config.dsn
        connect_kwargs = {
            "host": dsn.host or "localhost",
            "user": dsn.username,
            "password": dsn.password,
            "database": dsn.database,
            **options,
        }
        if dsn.port:
            connect_kwargs["port"] = dsn.port

        try:
            connection = driver.connect(**connect_kwargs)
        except Exception as exc:
            raise AdapterConnectionError("Failed to connect to MySQL.") from exc
        if hasattr(connection, "autocommit"):
            connection.autocommit(config.autocommit)

        self._state = MySQLConnectionState(connection, config, driver, connect_kwargs)
        return connection

    def close(self) -> None:
        if self._state:
            try:
                self._state.connection.close()
            finally:
                self._state = None

    def _ensure_connection(self):
        if not self._state:
            raise AdapterConnectionError("MySQLAdapter is not connected.")
        conn = self._state.connection
        if getattr(conn, "closed", False):
            self.logger.warning("MySQL connection closed; reconnecting.")
            conn = self.connect(self._state.config)
        return conn

    def execute(self, sql: str, params: Sequence[Any] | None = None):
        connection = self._ensure_connection()
        params = params or ()
        validate_format_params(sql, params)
        cursor = connection.cursor()
        try:
            with time_call(
                "mysql.execute",
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
        """
        Kill the running statement from a second, short-lived connection.

        The MySQL protocol has no out-of-band cancel and the driver connection
        is not safe to touch from another thread.
        """

        state = self._state
        if state is None:
            return
        thread_id = state.connection.thread_id()
        killer = state.driver.connect(**state.connect_kwargs)
        try:
            cursor = killer.cursor()
            try:
                cursor.execute("KILL QUERY %s", (thread_id,))
            finally:
                close_quietly(cursor, self.logger)
        finally:
            close_quietly(killer, self.logger)
        self.logger.info("Killed query on MySQL connection %s", thread_id)

    def product_name(self) -> str:
        return "MySQL"

    def product_version(self) -> str:
        cursor = self.execute("SELECT VERSION()")
        try:
            return cursor.fetchone()[0]
        finally:
            cursor.close()

    def identifier_quote_string(self) -> str | None:
        # DB-API drivers do not report a quote string; ANSI_QUOTES is the only
        # mode where it is not the backtick.
        cursor = self.execute("SELECT @@SESSION.sql_mode")
        try:
            row = cursor.fetchone()
        finally:
            cursor.close()
        if row and row[0] and "ANSI_QUOTES" in str(row[0]).upper().split(","):
            return '"'
        return None

    def index_info(self, catalog: str | None, schema: str | None, table: str) -> Iterator[IndexInfo]:
        # MySQL calls a database a catalog in some drivers and a schema in others.
        database = catalog or schema
        cursor = self.execute(_TABLE_STATISTIC_SQL, (database, table))
        try:
            row = cursor.fetchone()
        finally:
            cursor.close()
        if row is not None and row[0] is not None:
            yield IndexInfo(None, False, IndexType.TABLE_STATISTIC, int(row[0]))

        cursor = self.execute(_INDEX_SQL, (database, table))
        try:
            for name, non_unique, cardinality in cursor:
                if cardinality is None:
                    continue
                yield IndexInfo(name, bool(non_unique), IndexType.INDEX, int(cardinality))
        finally:
            cursor.close()
