from contextlib import contextmanager

import pytest

from dialectkit.adapters import DataSource, IndexInfo, IndexType
from dialectkit.dialects import DatabaseProduct, dialect_for
from dialectkit.errors import ExecutionCancelledError, StatisticsError
from dialectkit.execution import Execution
from dialectkit.statistics import MetadataStatisticsProvider, SqlStatisticsProvider, StatisticsChain

DIALECT = dialect_for(DatabaseProduct.MYSQL, "8.0.33")


def table_stat(cardinality):
    return IndexInfo(None, False, IndexType.TABLE_STATISTIC, cardinality)


def index(name, cardinality, non_unique=True):
    return IndexInfo(name, non_unique, IndexType.INDEX, cardinality)


class FakeAdapter:
    def __init__(self, rows, fail_after=None):
        self.rows = rows
        self.fail_after = fail_after
        self.cursor_closes = 0
        self.cancelled = 0
        self.requests = []

    def index_info(self, catalog, schema, table):
        self.requests.append((catalog, schema, table))
        try:
            for position, row in enumerate(self.rows):
                if self.fail_after is not None and position == self.fail_after:
                    raise ConnectionError("lost connection during metadata read")
                yield row
        finally:
            self.cursor_closes += 1

    def cancel(self):
        self.cancelled += 1


class FakeDataSource:
    def __init__(self, adapter):
        self.adapter = adapter
        self.acquired = 0
        self.released = 0

    @contextmanager
    def acquire(self):
        self.acquired += 1
        try:
            yield self.adapter
        finally:
            self.released += 1


def table_cardinality(rows, **kwargs):
    source = FakeDataSource(FakeAdapter(rows, **kwargs))
    value = MetadataStatisticsProvider().table_cardinality(DIALECT, source, None, "shop", "orders")
    return value, source


def test_table_statistic_row_wins():
    value, _ = table_cardinality([index("a", 10), table_stat(500), index("b", 499)])
    assert value == 500


def test_table_statistic_precedence_over_smaller_non_unique_indexes():
    value, _ = table_cardinality([index("a", 10), index("b", 20), table_stat(30)])
    assert value == 30


def test_max_non_unique_index_approximates_row_count():
    value, _ = table_cardinality([index("a", 5), index("b", 20), index("c", 12)])
    assert value == 20


def test_unique_indexes_are_ignored():
    value, _ = table_cardinality([index("pk", 1000, non_unique=False), index("a", 20)])
    assert value == 20


def test_only_unique_indexes_is_unknown():
    value, _ = table_cardinality([index("pk", 1000, non_unique=False), index("uq", 900, non_unique=False)])
    assert value is None


def test_no_metadata_is_unknown():
    value, _ = table_cardinality([])
    assert value is None


def test_zero_is_a_valid_answer():
    value, _ = table_cardinality([table_stat(0)])
    assert value == 0


def test_resources_released_once_on_early_return():
    value, source = table_cardinality([table_stat(5), index("a", 3)])
    assert value == 5
    assert source.adapter.cursor_closes == 1
    assert (source.acquired, source.released) == (1, 1)


def test_failure_during_iteration_releases_everything_once():
    with pytest.raises(StatisticsError) as excinfo:
        table_cardinality([index("a", 5), index("b", 7)], fail_after=1)
    assert "table [orders]" in excinfo.value.context
    assert isinstance(excinfo.value.cause, ConnectionError)


def test_failure_counts_each_release_once():
    source = FakeDataSource(FakeAdapter([index("a", 5), index("b", 7)], fail_after=1))
    with pytest.raises(StatisticsError):
        MetadataStatisticsProvider().table_cardinality(DIALECT, source, None, "shop", "orders")
    assert source.adapter.cursor_closes == 1
    assert (source.acquired, source.released) == (1, 1)


def test_column_cardinality_uses_table_statistic():
    source = FakeDataSource(FakeAdapter([index("a", 5), table_stat(80)]))
    provider = MetadataStatisticsProvider()
    assert provider.column_cardinality(DIALECT, source, None, "shop", "orders", "region") == 80


def test_column_cardinality_unknown_without_table_statistic():
    source = FakeDataSource(FakeAdapter([index("a", 5)]))
    provider = MetadataStatisticsProvider()
    assert provider.column_cardinality(DIALECT, source, None, "shop", "orders", "region") is None


def test_query_cardinality_is_always_unknown():
    source = FakeDataSource(FakeAdapter([table_stat(80)]))
    assert MetadataStatisticsProvider().query_cardinality(DIALECT, source, "select 1") is None
    assert source.acquired == 0


def test_cancelled_execution_does_not_touch_backend():
    source = FakeDataSource(FakeAdapter([table_stat(80)]))
    execution = Execution()
    execution.cancel()
    with pytest.raises(ExecutionCancelledError):
        MetadataStatisticsProvider().table_cardinality(DIALECT, source, None, None, "orders", execution)
    assert source.adapter.requests == []
    assert (source.acquired, source.released) == (0, 0)


@pytest.fixture
def sqlite_source(tmp_path):
    source = DataSource.from_dsn(f"sqlite:///{tmp_path / 'stats.db'}")
    with source.acquire() as adapter:
        adapter.execute("CREATE TABLE items (id INTEGER PRIMARY KEY, category TEXT)").close()
        adapter.execute("CREATE INDEX idx_items_category ON items (category)").close()
        adapter.execute("CREATE TABLE plain (x INTEGER)").close()
        adapter.execute("CREATE TABLE codes (code TEXT UNIQUE)").close()
        for i in range(20):
            adapter.execute("INSERT INTO items (category) VALUES (?)", (f"cat{i % 4}",)).close()
        for i in range(7):
            adapter.execute("INSERT INTO plain (x) VALUES (?)", (i,)).close()
        for i in range(5):
            adapter.execute("INSERT INTO codes (code) VALUES (?)", (f"c{i}",)).close()
        adapter.execute("ANALYZE").close()
    return source


def test_sqlite_end_to_end(sqlite_source):
    dialect = dialect_for(DatabaseProduct.SQLITE, "3.45.1")
    provider = MetadataStatisticsProvider()
    assert provider.table_cardinality(dialect, sqlite_source, None, None, "items") == 20
    assert provider.table_cardinality(dialect, sqlite_source, None, "main", "plain") == 7
    assert provider.column_cardinality(dialect, sqlite_source, None, None, "plain", "x") == 7
    assert provider.table_cardinality(dialect, sqlite_source, None, None, "codes") is None


def test_sqlite_chain_falls_back_to_count(sqlite_source):
    dialect = dialect_for(DatabaseProduct.SQLITE, "3.45.1")
    chain = StatisticsChain([MetadataStatisticsProvider(), SqlStatisticsProvider()])
    assert chain.table_cardinality(dialect, sqlite_source, None, None, "codes") == 5
    assert chain.column_cardinality(dialect, sqlite_source, None, None, "items", "category") == 4
    assert chain.query_cardinality(dialect, sqlite_source, "SELECT * FROM items WHERE category = 'cat1'") == 5
