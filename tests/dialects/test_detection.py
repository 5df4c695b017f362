import sqlite3

import pytest

from dialectkit.adapters import DataSource, SQLiteAdapter
from dialectkit.config import ConnectionConfig
from dialectkit.dialects import DatabaseProduct, detect_dialect, detect_dialect_for, normalize_product_name
from dialectkit.errors import DetectionError


class FakeCursor:
    def __init__(self, rows, fail_on_close=False):
        self.rows = list(rows)
        self.closed = 0
        self.fail_on_close = fail_on_close

    def fetchone(self):
        return self.rows.pop(0) if self.rows else None

    def close(self):
        self.closed += 1
        if self.fail_on_close:
            raise RuntimeError("close failed")


class FakeAdapter:
    def __init__(self, name, version, quote=None, results=None, fail_on_close=False):
        self.name = name
        self.version = version
        self.quote = quote
        self.results = results or {}
        self.fail_on_close = fail_on_close
        self.executed = []
        self.cursors = []

    def product_name(self):
        return self.name

    def product_version(self):
        if isinstance(self.version, Exception):
            raise self.version
        return self.version

    def identifier_quote_string(self):
        return self.quote

    def execute(self, sql, params=None):
        self.executed.append(sql)
        result = self.results.get(sql, [])
        if isinstance(result, Exception):
            raise result
        cursor = FakeCursor(result, fail_on_close=self.fail_on_close)
        self.cursors.append(cursor)
        return cursor


INFOBRIGHT_SQL = "select * from INFORMATION_SCHEMA.engines where ENGINE = 'BRIGHTHOUSE'"


def test_mysql_detection_overrides_missing_quote_string():
    dialect = detect_dialect(FakeAdapter("MySQL", "8.0.33"))
    assert dialect.product is DatabaseProduct.MYSQL
    assert dialect.version == "8.0.33"
    assert dialect.quote_char() == "`"


def test_reported_quote_string_wins():
    dialect = detect_dialect(FakeAdapter("MySQL", "8.0.33", quote='"'))
    assert dialect.quote_char() == '"'


def test_mariadb_detected_from_version_without_query():
    adapter = FakeAdapter("MySQL", "5.5.5-10.6.12-MariaDB")
    dialect = detect_dialect(adapter)
    assert dialect.product is DatabaseProduct.MARIADB
    assert adapter.executed == []


def test_infobright_detected_by_engine_probe():
    adapter = FakeAdapter("MySQL", "5.1.40", results={INFOBRIGHT_SQL: [("BRIGHTHOUSE", "YES")]})
    dialect = detect_dialect(adapter)
    assert dialect.product is DatabaseProduct.INFOBRIGHT
    assert dialect.allows_compound_count_distinct() is False
    assert dialect.quote_char() == "`"
    assert all(cursor.closed == 1 for cursor in adapter.cursors)


def test_probe_without_rows_is_not_a_match():
    adapter = FakeAdapter("MySQL", "5.7.44")
    assert detect_dialect(adapter).product is DatabaseProduct.MYSQL
    assert adapter.executed == [INFOBRIGHT_SQL]


def test_probe_skipped_below_minimum_version():
    adapter = FakeAdapter("MySQL", "5.0.96")
    assert detect_dialect(adapter).product is DatabaseProduct.MYSQL
    assert adapter.executed == []


def test_failing_probe_is_treated_as_no_match():
    adapter = FakeAdapter("MySQL", "5.7.44", results={INFOBRIGHT_SQL: RuntimeError("unknown table")})
    assert detect_dialect(adapter).product is DatabaseProduct.MYSQL


def test_probe_close_failure_does_not_mask_result():
    adapter = FakeAdapter(
        "MySQL",
        "5.1.40",
        results={INFOBRIGHT_SQL: [("BRIGHTHOUSE",)]},
        fail_on_close=True,
    )
    assert detect_dialect(adapter).product is DatabaseProduct.INFOBRIGHT


def test_redshift_detected_from_version_function():
    adapter = FakeAdapter(
        "PostgreSQL",
        "8.0.2",
        quote='"',
        results={"select version()": [("PostgreSQL 8.0.2 on i686-pc-linux-gnu, Redshift 1.0.55524",)]},
    )
    assert detect_dialect(adapter).product is DatabaseProduct.REDSHIFT


def test_plain_postgres_stays_postgres():
    adapter = FakeAdapter(
        "PostgreSQL",
        "15.4",
        quote='"',
        results={"select version()": [("PostgreSQL 15.4 on x86_64-pc-linux-gnu",)]},
    )
    dialect = detect_dialect(adapter)
    assert dialect.product is DatabaseProduct.POSTGRESQL
    assert dialect.supports_grouping_sets() is True


def test_unknown_product_is_generic():
    dialect = detect_dialect(FakeAdapter("Firebird", "4.0", quote=" "))
    assert dialect.product is DatabaseProduct.GENERIC
    assert dialect.quote_char() == '"'


def test_metadata_failure_raises_detection_error():
    cause = ConnectionError("server gone away")
    with pytest.raises(DetectionError) as excinfo:
        detect_dialect(FakeAdapter("MySQL", cause))
    assert "while detecting dialect" in excinfo.value.context
    assert "MySQL" in excinfo.value.context
    assert excinfo.value.cause is cause


@pytest.mark.parametrize(
    "name, product",
    [
        ("MySQL", DatabaseProduct.MYSQL),
        ("MySQL (Infobright)", DatabaseProduct.INFOBRIGHT),
        ("MariaDB", DatabaseProduct.MARIADB),
        ("PostgreSQL", DatabaseProduct.POSTGRESQL),
        ("Oracle", DatabaseProduct.ORACLE),
        ("SQLite", DatabaseProduct.SQLITE),
        ("", DatabaseProduct.GENERIC),
        (None, DatabaseProduct.GENERIC),
    ],
)
def test_normalize_product_name(name, product):
    assert normalize_product_name(name) is product


def test_detects_live_sqlite_connection():
    adapter = SQLiteAdapter()
    adapter.connect(ConnectionConfig(url="sqlite:///:memory:"))
    try:
        first = detect_dialect(adapter)
        second = detect_dialect(adapter)
    finally:
        adapter.close()
    assert first.product is DatabaseProduct.SQLITE
    assert first.version == sqlite3.sqlite_version
    assert first == second


def test_detect_dialect_for_data_source():
    dialect = detect_dialect_for(DataSource.from_dsn("sqlite:///:memory:"))
    assert dialect.product is DatabaseProduct.SQLITE
    assert dialect.quote_char() == '"'
