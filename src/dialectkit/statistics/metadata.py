"""
Statistics provider that reads the backend's index metadata.
"""

from __future__ import annotations

from contextlib import closing
from typing import TYPE_CHECKING, Optional

from ..adapters.base import IndexType
from ..errors import ExecutionCancelledError, StatisticsError
from ..execution import Execution

if TYPE_CHECKING:
    from ..adapters.datasource import DataSource
    from ..dialects.base import Dialect


class MetadataStatisticsProvider:
    """
    Counts rows and distinct values from index statistics the backend keeps.

    Cheap: no query touches table data. Cannot estimate arbitrary queries.
    """

    def table_cardinality(
        self,
        dialect: "Dialect",
        data_source: "DataSource",
        catalog: str | None,
        schema: str | None,
        table: str,
        execution: Execution | None = None,
    ) -> Optional[int]:
        execution = execution or Execution()
        # Refuse before dialing the backend; a connect cannot be interrupted.
        execution.check_cancelled()
        try:
            with data_source.acquire() as adapter, execution.running(adapter):
                with closing(adapter.index_info(catalog, schema, table)) as rows:
                    max_non_unique: Optional[int] = None
                    for info in rows:
                        if info.type is IndexType.TABLE_STATISTIC:
                            return info.cardinality
                        if info.non_unique:
                            if max_non_unique is None or info.cardinality > max_non_unique:
                                max_non_unique = info.cardinality
                    # A non-unique index holds one entry per non-NULL value;
                    # the fullest one is the best row count available.
                    return max_non_unique
        except ExecutionCancelledError:
            raise
        except Exception as exc:
            raise StatisticsError(f"while computing cardinality of table [{table}]") from exc

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
        execution = execution or Execution()
        # Refuse before dialing the backend; a connect cannot be interrupted.
        execution.check_cancelled()
        try:
            with data_source.acquire() as adapter, execution.running(adapter):
                with closing(adapter.index_info(catalog, schema, table)) as rows:
                    for info in rows:
                        if info.type is IndexType.TABLE_STATISTIC:
                            return info.cardinality
                    return None
        except ExecutionCancelledError:
            raise
        except Exception as exc:
            raise StatisticsError(
                f"while computing cardinality of column [{table}].[{column}]"
            ) from exc

    def query_cardinality(
        self,
        dialect: "Dialect",
        data_source: "DataSource",
        sql: str,
        execution: Execution | None = None,
    ) -> Optional[int]:
        # Arbitrary SQL has no metadata entry; defer to the next provider.
        return None
