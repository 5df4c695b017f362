"""
Statistics provider that runs COUNT queries.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from ..dialects.base import DatabaseProduct
from ..errors import ExecutionCancelledError, StatisticsError
from ..execution import Execution

if TYPE_CHECKING:
    from ..adapters.datasource import DataSource
    from ..dialects.base import Dialect


def qualified_table(dialect: "Dialect", catalog: str | None, schema: str | None, table: str) -> str:
    if dialect.product.family is DatabaseProduct.MYSQL:
        # MySQL databases double as catalog and schema.
        return dialect.quote_identifier(catalog or schema, table)
    return dialect.quote_identifier(schema, table)


class SqlStatisticsProvider:
    """
    Computes exact cardinalities with ``count(*)`` queries.

    Expensive but definitive; usually the last provider in a chain.
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
        sql = "select count(*) from " + qualified_table(dialect, catalog, schema, table)
        return self._count(
            data_source, sql, execution, f"while counting rows of table [{table}]"
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
        table_sql = qualified_table(dialect, catalog, schema, table)
        column_sql = dialect.quote_identifier(column)
        if dialect.allows_count_distinct():
            sql = f"select count(distinct {column_sql}) from {table_sql}"
        elif dialect.allows_derived_table_in_from():
            sql = (
                f"select count(*) from (select distinct {column_sql} from {table_sql})"
                + dialect.derived_table_alias()
            )
        else:
            return None
        return self._count(
            data_source,
            sql,
            execution,
            f"while counting distinct values of column [{table}].[{column}]",
        )

    def query_cardinality(
        self,
        dialect: "Dialect",
        data_source: "DataSource",
        sql: str,
        execution: Execution | None = None,
    ) -> Optional[int]:
        if not dialect.allows_derived_table_in_from():
            return None
        count_sql = f"select count(*) from ({sql})" + dialect.derived_table_alias()
        return self._count(
            data_source, count_sql, execution, f"while counting rows of query [{sql}]"
        )

    @staticmethod
    def _count(
        data_source: "DataSource",
        sql: str,
        execution: Execution | None,
        context: str,
    ) -> Optional[int]:
        execution = execution or Execution()
        # Refuse before dialing the backend; a connect cannot be interrupted.
        execution.check_cancelled()
        try:
            with data_source.acquire() as adapter, execution.running(adapter):
                cursor = adapter.execute(sql)
                try:
                    row = cursor.fetchone()
                finally:
                    cursor.close()
        except ExecutionCancelledError:
            raise
        except Exception as exc:
            raise StatisticsError(context) from exc
        if row is None or row[0] is None:
            return None
        return int(row[0])
