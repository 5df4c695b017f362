"""
SQLite database adapter implementation.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Any, Iterator, Sequence

from ..config import ConnectionConfig, resolve_slow_query_ms
from ..utils import get_logger, time_call
from .base import (
    AdapterConnectionError,
    DatabaseAdapter,
    IndexInfo,
    IndexType,
    close_quietly,
    redact_params,
)


@dataclass(slots=True)
class SQLiteConnectionState:
    connection: sqlite3.Connection


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


def _leading_count(stat: str | None) -> int | None:
    # sqlite_stat1.stat is "<rows> <avg rows per key prefix> ... [flags]"
    if not stat:
        return None
    head = stat.split(" ", 1)[0]
    try:
        return int(head)
    except ValueError:
        return None


class SQLiteAdapter(DatabaseAdapter):
    """
    Adapter wrapping the Python stdlib sqlite3 module.
    """

    def __init__(self, slow_query_ms: int | None = None) -> None:
        self._state: SQLiteConnectionState | None = None
        self.logger = get_logger("adapters.sqlite")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)

    # ------------------------------------------------------------------ #
    # Connection management
    # ------------------------------------------------------------------ #
    def connect(self, config: ConnectionConfig) -> sqlite3.Connection:
        path = self._normalize_path(config.url)
        timeout = config.timeout if config.timeout is not None else 5.0

        connection = sqlite3.connect(
            path,
            isolation_level=None if config.autocommit else "",
            timeout=timeout,
            check_same_thread=False,
        )
        self._state = SQLiteConnectionState(connection)
        return connection

    def attach(self, connection: sqlite3.Connection) -> None:
        """
        Wrap an already-open connection instead of opening one.
        """

        self._state = SQLiteConnectionState(connection)

    def close(self) -> None:
        if self._state:
            try:
                self._state.connection.close()
            finally:
                self._state = None

    def _ensure_connection(self) -> sqlite3.Connection:
        if not self._state:
            raise AdapterConnectionError("SQLiteAdapter is not connected.")
        return self._state.connection

    # ------------------------------------------------------------------ #
    # Execution helpers
    # ------------------------------------------------------------------ #
    def execute(self, sql: str, params: Sequence[Any] | None = None) -> sqlite3.Cursor:
        connection = self._ensure_connection()
        cursor = connection.cursor()
        params = params or ()
        try:
            with time_call(
                "sqlite.execute",
                self.logger,
                sql=sql,
                params=redact_params(params),
                threshold_ms=self.slow_query_ms,
            ):
                cursor.execute(sql, params)
        except BaseException:
            close_quietly(cursor, self.logger)
            raise
        return cursor

    def cancel(self) -> None:
        if self._state:
            self._state.connection.interrupt()

    # ------------------------------------------------------------------ #
    # Metadata
    # ------------------------------------------------------------------ #
    def product_name(self) -> str:
        return "SQLite"

    def product_version(self) -> str:
        cursor = self.execute("SELECT sqlite_version()")
        try:
            return cursor.fetchone()[0]
        finally:
            cursor.close()

    def identifier_quote_string(self) -> str | None:
        return '"'

    def index_info(self, catalog: str | None, schema: str | None, table: str) -> Iterator[IndexInfo]:
        database = schema or catalog or "main"
        unique: dict[str, bool] = {}
        cursor = self.execute(
            'SELECT name, "unique" FROM pragma_index_list(?, ?)', (table, database)
        )
        try:
            for name, is_unique in cursor:
                unique[name] = bool(is_unique)
        finally:
            cursor.close()

        if not self._has_stat_table(database):
            return
        cursor = self.execute(
            f"SELECT idx, stat FROM {_quote(database)}.sqlite_stat1 WHERE tbl = ?", (table,)
        )
        try:
            for idx, stat in cursor:
                count = _leading_count(stat)
                if count is None:
                    continue
                if idx is None:
                    yield IndexInfo(None, False, IndexType.TABLE_STATISTIC, count)
                else:
                    yield IndexInfo(idx, not unique.get(idx, False), IndexType.INDEX, count)
        finally:
            cursor.close()

    def _has_stat_table(self, database: str) -> bool:
        cursor = self.execute(
            f"SELECT 1 FROM {_quote(database)}.sqlite_master WHERE type = 'table' AND name = 'sqlite_stat1'"
        )
        try:
            return cursor.fetchone() is not None
        finally:
            cursor.close()

    @staticmethod
    def _normalize_path(url: str) -> str:
        url = url.split("?", 1)[0]
        if url in ("sqlite://", "sqlite:///:memory:"):
            return ":memory:"
        prefix = "sqlite:///"
        if url.startswith(prefix):
            return url[len(prefix) :]
        return url
