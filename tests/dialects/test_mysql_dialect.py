import pytest

from dialectkit.dialects import DatabaseProduct, capabilities_for, dialect_for


@pytest.fixture
def dialect():
    return dialect_for(DatabaseProduct.MYSQL, "8.0.33")


def test_mysql_dialect_quotes_identifiers(dialect):
    assert dialect.quote_char() == "`"
    assert dialect.quote_identifier("user`name") == "`user``name`"
    assert dialect.quote_identifier("analytics", "events") == "`analytics`.`events`"
    assert dialect.quote_identifier(None, "events") == "`events`"


def test_mysql_capability_flags(dialect):
    assert dialect.requires_alias_for_derived_table() is True
    assert dialect.allows_derived_table_in_from() is True
    assert dialect.allows_compound_count_distinct() is True
    assert dialect.supports_multi_value_in() is True
    assert dialect.nulls_sort_last() is False
    assert dialect.requires_order_by_alias() is True


@pytest.mark.parametrize(
    "version, expected",
    [("3.23.58", False), ("3.23", False), ("4.0", True), ("4.1.22", True), ("5.1", True), ("10.1", True)],
)
def test_derived_tables_gated_at_version_four(version, expected):
    assert dialect_for(DatabaseProduct.MYSQL, version).allows_derived_table_in_from() is expected


def test_nulls_last_rewrite_uses_isnull(dialect):
    assert dialect.rewrite_for_nulls_last("col") == "ISNULL(col), col"


def test_order_item_rewrites_only_when_default_differs(dialect):
    assert dialect.generate_order_item("col", ascending=True) == "ISNULL(col), col ASC"
    # MySQL already sorts NULLs last when descending.
    assert dialect.generate_order_item("col", ascending=False) == "col DESC"
    assert dialect.generate_order_item("col", nullable=False) == "col ASC"


def test_inline_table_union_all(dialect):
    sql = dialect.generate_inline_table(
        ["name", "qty"],
        ["String", "Integer"],
        [["a", "1"], ["o'b", None]],
    )
    assert sql == (
        "select 'a' as `name`, 1 as `qty` union all "
        "select 'o''b' as `name`, null as `qty`"
    )


def test_string_literals_escape_backslashes(dialect):
    assert dialect.quote_string_literal("a\\b") == "'a\\\\b'"


def test_derived_table_alias(dialect):
    assert dialect.derived_table_alias() == " as `init`"


def test_dialect_is_immutable(dialect):
    with pytest.raises(AttributeError):
        dialect.version = "9.0"


def test_infobright_cannot_group_by_expressions(dialect):
    infobright = dialect_for(DatabaseProduct.INFOBRIGHT, "5.1.40")
    assert dialect.supports_group_by_expressions() is True
    assert infobright.supports_group_by_expressions() is False
    assert infobright.requires_group_by_alias() is True


@pytest.mark.parametrize("version", ["3.23.58", "5.1.40"])
def test_capabilities_match_dialect_for(version):
    capabilities = capabilities_for(DatabaseProduct.MYSQL, version)
    assert capabilities == dialect_for(DatabaseProduct.MYSQL, version).capabilities
    assert capabilities.allows_from_query is (version != "3.23.58")
