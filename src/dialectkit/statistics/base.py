"""
Statistics provider interface and the ordered fallback chain.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Optional, Protocol, Sequence

from ..execution import Execution
from ..utils import get_logger

if TYPE_CHECKING:
    from ..adapters.datasource import DataSource
    from ..dialects.base import Dialect


class StatisticsProvider(Protocol):
    """
    One strategy for estimating cardinalities.

    Every operation returns a non-negative estimate, or ``None`` when this
    provider cannot tell. Only backend failures raise. Providers hold no state
    between calls.
    """

    def table_cardinality(
        self,
        dialect: "Dialect",
        data_source: "DataSource",
        catalog: str | None,
        schema: str | None,
        table: str,
        execution: Execution | None = None,
    ) -> Optional[int]: ...

    def column_cardinality(
        self,
        dialect: "Dialect",
        data_source: "DataSource",
        catalog: str | None,
        schema: str | None,
        table: str,
        column: str,
        execution: Execution | None = None,
    ) -> Optional[int]: ...

    def query_cardinality(
        self,
        dialect: "Dialect",
        data_source: "DataSource",
        sql: str,
        execution: Execution | None = None,
    ) -> Optional[int]: ...


class StatisticsChain:
    """
    Asks each provider in turn; the first non-``None`` answer wins.
    """

    def __init__(self, providers: Sequence[StatisticsProvider]) -> None:
        self.providers = tuple(providers)
        self.logger = get_logger("statistics.chain")

    def __repr__(self) -> str:
        names = ", ".join(type(provider).__name__ for provider in self.providers)
        return f"StatisticsChain([{names}])"

    def table_cardinality(
        self,
        dialect: "Dialect",
        data_source: "DataSource",
        catalog: str | None,
        schema: str | None,
        table: str,
        execution: Execution | None = None,
    ) -> Optional[int]:
        return self._first(
            f"table [{table}]",
            lambda provider: provider.table_cardinality(
                dialect, data_source, catalog, schema, table, execution
            ),
        )

    def column_cardinality(
        self,
        dialect: "Dialect",
        data_source: "DataSource",
        catalog: str | None,
        schema: str | None,
        table: str,
        column: str,
        execution: Execution | None = None,
    ) -> Optional[int]:
        return self._first(
            f"column [{table}].[{column}]",
            lambda provider: provider.column_cardinality(
                dialect, data_source, catalog, schema, table, column, execution
            ),
        )

    def query_cardinality(
        self,
        dialect: "Dialect",
        data_source: "DataSource",
        sql: str,
        execution: Execution | None = None,
    ) -> Optional[int]:
        return self._first(
            "query",
            lambda provider: provider.query_cardinality(dialect, data_source, sql, execution),
        )

    def _first(
        self, target: str, ask: Callable[[StatisticsProvider], Optional[int]]
    ) -> Optional[int]:
        for provider in self.providers:
            value = ask(provider)
            if value is not None and value >= 0:
                self.logger.debug(
                    "%s answered cardinality of %s: %s", type(provider).__name__, target, value
                )
                return value
        self.logger.debug("No statistics provider could estimate %s", target)
        return None
