"""
Dialect value types describing how SQL is generated for a backend.
"""

from __future__ import annotations

import datetime
import enum
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Sequence


class DatabaseProduct(enum.Enum):
    GENERIC = "generic"
    MYSQL = "mysql"
    MARIADB = "mariadb"
    INFOBRIGHT = "infobright"
    POSTGRESQL = "postgresql"
    REDSHIFT = "redshift"
    ORACLE = "oracle"
    SQLITE = "sqlite"

    @property
    def family(self) -> "DatabaseProduct":
        """The product whose driver and catalog this product shares."""
        if self in (DatabaseProduct.MARIADB, DatabaseProduct.INFOBRIGHT):
            return DatabaseProduct.MYSQL
        if self is DatabaseProduct.REDSHIFT:
            return DatabaseProduct.POSTGRESQL
        return self


class Datatype(enum.Enum):
    STRING = "String"
    NUMERIC = "Numeric"
    INTEGER = "Integer"
    BOOLEAN = "Boolean"
    DATE = "Date"
    TIME = "Time"
    TIMESTAMP = "Timestamp"

    @classmethod
    def parse(cls, value: "str | Datatype") -> "Datatype":
        if isinstance(value, Datatype):
            return value
        normalized = value.strip().lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        raise ValueError(f"Unknown datatype {value!r}")


class InlineStrategy(enum.Enum):
    # select v as c union all select ...
    UNION_ALL = "union_all"
    # same, every branch selecting from dual
    UNION_ALL_FROM_DUAL = "union_all_from_dual"
    # SELECT * FROM (VALUES (...), ...) AS t (c, ...)
    VALUES = "values"


@dataclass(frozen=True)
class DialectCapabilities:
    """
    Feature flags describing backend capabilities.

    Defaults describe a conservative ANSI backend.
    """

    allows_as: bool = True
    allows_from_query: bool = True
    requires_alias_for_from_query: bool = False
    allows_count_distinct: bool = True
    allows_compound_count_distinct: bool = False
    supports_multi_value_in: bool = False
    nulls_collate_last: bool = False
    supports_nulls_last_syntax: bool = False
    requires_order_by_alias: bool = False
    requires_group_by_alias: bool = False
    supports_group_by_expressions: bool = True
    supports_grouping_sets: bool = False
    supports_typed_temporal_literals: bool = True
    escapes_backslash_in_literals: bool = False
    null_key_function: str | None = None
    inline_strategy: InlineStrategy = InlineStrategy.UNION_ALL


_VERSION_PART_RE = re.compile(r"\d+")


def _numeric_parts(version: str) -> tuple[int, ...] | None:
    match = re.match(r"\s*(\d+(?:\.\d+)*)", version)
    if not match:
        return None
    return tuple(int(part) for part in _VERSION_PART_RE.findall(match.group(1)))


def version_at_least(version: str, minimum: str) -> bool:
    """
    Return whether ``version`` is at or above ``minimum``.

    Numeric components are compared when both strings start with a dotted
    number; otherwise the version is truncated to the length of ``minimum``
    and compared as a string.
    """

    actual = _numeric_parts(version)
    wanted = _numeric_parts(minimum)
    if actual is not None and wanted is not None:
        width = max(len(actual), len(wanted))
        return actual + (0,) * (width - len(actual)) >= wanted + (0,) * (width - len(wanted))
    return version[: len(minimum)] >= minimum


@dataclass(frozen=True)
class Dialect:
    """
    Capability and syntax profile of one backend, fixed at detection time.

    Every method is a pure function of the instance; a dialect can be shared
    across threads for the lifetime of its connection.
    """

    product: DatabaseProduct
    version: str
    quote_string: str
    capabilities: DialectCapabilities = field(default_factory=DialectCapabilities)

    @property
    def name(self) -> str:
        return self.product.value

    # ------------------------------------------------------------------ #
    # Capability accessors
    # ------------------------------------------------------------------ #
    def quote_char(self) -> str:
        return self.quote_string

    def requires_alias_for_derived_table(self) -> bool:
        return self.capabilities.requires_alias_for_from_query

    def allows_derived_table_in_from(self) -> bool:
        return self.capabilities.allows_from_query

    def allows_count_distinct(self) -> bool:
        return self.capabilities.allows_count_distinct

    def allows_compound_count_distinct(self) -> bool:
        return self.capabilities.allows_compound_count_distinct

    def supports_multi_value_in(self) -> bool:
        return self.capabilities.supports_multi_value_in

    def nulls_sort_last(self) -> bool:
        return self.capabilities.nulls_collate_last

    def requires_order_by_alias(self) -> bool:
        return self.capabilities.requires_order_by_alias

    def requires_group_by_alias(self) -> bool:
        return self.capabilities.requires_group_by_alias

    def supports_grouping_sets(self) -> bool:
        return self.capabilities.supports_grouping_sets

    def supports_group_by_expressions(self) -> bool:
        return self.capabilities.supports_group_by_expressions

    # ------------------------------------------------------------------ #
    # Identifiers
    # ------------------------------------------------------------------ #
    def quote_identifier(self, *names: str | None) -> str:
        """
        Quote and dot-join identifier parts, skipping ``None`` parts.
        """

        quote = self.quote_string.strip()
        parts = []
        for name in names:
            if name is None:
                continue
            if not quote:
                parts.append(name)
                continue
            escaped = name.replace(quote, quote + quote)
            parts.append(f"{quote}{escaped}{quote}")
        if not parts:
            raise ValueError("quote_identifier requires at least one name")
        return ".".join(parts)

    def derived_table_alias(self, alias: str = "init") -> str:
        if not self.capabilities.requires_alias_for_from_query:
            return ""
        keyword = " as " if self.capabilities.allows_as else " "
        return keyword + self.quote_identifier(alias)

    # ------------------------------------------------------------------ #
    # Null ordering
    # ------------------------------------------------------------------ #
    def rewrite_for_nulls_last(self, expr: str) -> str:
        """
        Two-key ORDER BY fragment placing NULL values of ``expr`` last.

        The null key sorts ascending, so a direction appended for ``expr``
        does not move the NULLs.
        """

        function = self.capabilities.null_key_function
        if function:
            return f"{function}({expr}), {expr}"
        return f"CASE WHEN {expr} IS NULL THEN 1 ELSE 0 END, {expr}"

    def rewrite_for_nulls_first(self, expr: str) -> str:
        return f"CASE WHEN {expr} IS NULL THEN 0 ELSE 1 END, {expr}"

    def generate_order_item(
        self,
        expr: str,
        *,
        nullable: bool = True,
        ascending: bool = True,
        collate_nulls_last: bool = True,
    ) -> str:
        direction = " ASC" if ascending else " DESC"
        if not nullable:
            return expr + direction
        # Backends put NULLs at one end for ASC and flip them for DESC.
        nulls_last_by_default = self.capabilities.nulls_collate_last == ascending
        if nulls_last_by_default == collate_nulls_last:
            return expr + direction
        if self.capabilities.supports_nulls_last_syntax:
            return expr + direction + (" NULLS LAST" if collate_nulls_last else " NULLS FIRST")
        if collate_nulls_last:
            return self.rewrite_for_nulls_last(expr) + direction
        return self.rewrite_for_nulls_first(expr) + direction

    # ------------------------------------------------------------------ #
    # Literals
    # ------------------------------------------------------------------ #
    def quote_string_literal(self, value: str) -> str:
        if self.capabilities.escapes_backslash_in_literals:
            value = value.replace("\\", "\\\\")
        return "'" + value.replace("'", "''") + "'"

    def quote_numeric_literal(self, value: Any) -> str:
        text = str(value).strip()
        try:
            number = Decimal(text)
        except InvalidOperation:
            raise ValueError(f"Not a numeric literal: {value!r}") from None
        if not number.is_finite():
            raise ValueError(f"Not a finite numeric literal: {value!r}")
        return text

    def quote_boolean_literal(self, value: Any) -> str:
        if isinstance(value, bool):
            return "TRUE" if value else "FALSE"
        text = str(value).strip()
        if text.lower() not in ("true", "false"):
            raise ValueError(f"Not a boolean literal: {value!r}")
        return text.upper()

    def quote_date_literal(self, value: Any) -> str:
        text = value.isoformat() if isinstance(value, datetime.date) else str(value).strip()
        try:
            datetime.date.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Not a date literal: {value!r}") from None
        return self._temporal_literal("DATE", text)

    def quote_time_literal(self, value: Any) -> str:
        text = value.isoformat() if isinstance(value, datetime.time) else str(value).strip()
        try:
            datetime.time.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Not a time literal: {value!r}") from None
        return self._temporal_literal("TIME", text)

    def quote_timestamp_literal(self, value: Any) -> str:
        if isinstance(value, datetime.datetime):
            text = value.isoformat(sep=" ")
        else:
            text = str(value).strip()
        try:
            datetime.datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Not a timestamp literal: {value!r}") from None
        return self._temporal_literal("TIMESTAMP", text)

    def _temporal_literal(self, keyword: str, text: str) -> str:
        if self.capabilities.supports_typed_temporal_literals:
            return f"{keyword} '{text}'"
        return self.quote_string_literal(text)

    def quote_value(self, value: Any, datatype: str | Datatype) -> str:
        if value is None:
            return "null"
        kind = Datatype.parse(datatype)
        if kind is Datatype.STRING:
            return self.quote_string_literal(str(value))
        if kind in (Datatype.NUMERIC, Datatype.INTEGER):
            return self.quote_numeric_literal(value)
        if kind is Datatype.BOOLEAN:
            return self.quote_boolean_literal(value)
        if kind is Datatype.DATE:
            return self.quote_date_literal(value)
        if kind is Datatype.TIME:
            return self.quote_time_literal(value)
        return self.quote_timestamp_literal(value)

    # ------------------------------------------------------------------ #
    # Inline tables
    # ------------------------------------------------------------------ #
    def generate_inline_table(
        self,
        column_names: Sequence[str],
        column_types: Sequence[str | Datatype],
        rows: Sequence[Sequence[Any]],
    ) -> str:
        """
        Build a literal-values pseudo-table usable in a FROM clause.
        """

        if len(column_names) != len(column_types):
            raise ValueError("column_names and column_types must have the same length")
        if not column_names:
            raise ValueError("An inline table needs at least one column")
        if not rows:
            raise ValueError("An inline table needs at least one row")
        types = [Datatype.parse(column_type) for column_type in column_types]
        for row in rows:
            if len(row) != len(column_names):
                raise ValueError(
                    f"Row {list(row)!r} has {len(row)} values, expected {len(column_names)}"
                )

        strategy = self.capabilities.inline_strategy
        if strategy is InlineStrategy.VALUES:
            return self._inline_values(column_names, types, rows)
        from_clause = " from dual" if strategy is InlineStrategy.UNION_ALL_FROM_DUAL else ""
        return self._inline_union_all(column_names, types, rows, from_clause)

    def _inline_union_all(
        self,
        column_names: Sequence[str],
        types: Sequence[Datatype],
        rows: Sequence[Sequence[Any]],
        from_clause: str,
    ) -> str:
        alias_keyword = " as " if self.capabilities.allows_as else " "
        branches = []
        for row in rows:
            items = [
                self.quote_value(value, datatype) + alias_keyword + self.quote_identifier(name)
                for value, datatype, name in zip(row, types, column_names)
            ]
            branches.append("select " + ", ".join(items) + from_clause)
        return " union all ".join(branches)

    def _inline_values(
        self,
        column_names: Sequence[str],
        types: Sequence[Datatype],
        rows: Sequence[Sequence[Any]],
    ) -> str:
        tuples = [
            "(" + ", ".join(self.quote_value(value, datatype) for value, datatype in zip(row, types)) + ")"
            for row in rows
        ]
        columns = ", ".join(self.quote_identifier(name) for name in column_names)
        return (
            "SELECT * FROM (VALUES "
            + ", ".join(tuples)
            + ") AS "
            + self.quote_identifier("init")
            + f" ({columns})"
        )
