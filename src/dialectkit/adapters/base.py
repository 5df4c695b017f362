"""
Adapter protocol definitions for dialectkit.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Iterator, Protocol, Sequence

from ..config import ConnectionConfig
from ..errors import DialectKitError


class AdapterError(DialectKitError):
    """Base error for adapter-related failures."""


class AdapterConfigurationError(AdapterError):
    """Raised when configuration or required dependencies are invalid."""


class AdapterConnectionError(AdapterError):
    """Raised when establishing or using a connection fails."""


class AdapterExecutionError(AdapterError):
    """Raised when SQL parameters do not match the statement."""


class IndexType(enum.Enum):
    # A pseudo-row whose cardinality is the row count of the whole table.
    TABLE_STATISTIC = "table_statistic"
    INDEX = "index"


@dataclass(frozen=True)
class IndexInfo:
    """
    One row of index metadata for a table.
    """

    index_name: str | None
    non_unique: bool
    type: IndexType
    cardinality: int


class DatabaseAdapter(Protocol):
    """
    Adapter interface exposing the connection operations dialectkit consumes.
    """

    slow_query_ms: int

    def connect(self, config: ConnectionConfig) -> Any:
        """
        Establish a connection handle using the supplied configuration.
        """

    def close(self) -> None:
        """
        Close underlying resources. Implementations should be idempotent.
        """

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> Any:
        """
        Execute a single SQL statement returning a cursor-like object.
        """

    def product_name(self) -> str:
        """
        Product name as reported by the backend or its driver.
        """

    def product_version(self) -> str:
        """
        Product version string as reported by the backend.
        """

    def identifier_quote_string(self) -> str | None:
        """
        Identifier quote string, or ``None`` when the driver cannot tell.
        """

    def index_info(self, catalog: str | None, schema: str | None, table: str) -> Iterator[IndexInfo]:
        """
        Yield index metadata rows for ``table``. Closing the iterator releases its cursor.
        """

    def cancel(self) -> None:
        """
        Cancel the statement currently running on this connection. Thread safe.
        """


def redact_params(params: Sequence[Any]) -> list[Any]:
    redacted = []
    for value in params:
        if isinstance(value, str) and any(
            token in value.lower() for token in ("password", "secret", "token")
        ):
            redacted.append("***")
        else:
            redacted.append(value)
    return redacted


def count_format_placeholders(sql: str) -> int:
    count = 0
    idx = 0
    while idx < len(sql) - 1:
        if sql[idx] == "%" and sql[idx + 1] == "s":
            count += 1
            idx += 2
            continue
        if sql[idx] == "%" and sql[idx + 1] == "%":
            idx += 2
            continue
        idx += 1
    return count


def validate_format_params(sql: str, params: Sequence[Any]) -> None:
    placeholder_count = count_format_placeholders(sql)
    if placeholder_count == 0:
        if params:
            raise AdapterExecutionError(
                "Parameters provided but SQL statement has no placeholders."
            )
        return
    if placeholder_count != len(params):
        raise AdapterExecutionError(
            f"Parameter count mismatch: expected {placeholder_count}, received {len(params)}."
        )


def close_quietly(resource: Any, logger: Any = None) -> None:
    """
    Close a cursor or connection, logging rather than raising on failure.
    """

    if resource is None:
        return
    try:
        resource.close()
    except Exception:
        if logger is not None:
            logger.debug("Ignoring failure while closing %r", resource, exc_info=True)
