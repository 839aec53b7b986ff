"""
Integration tests for TableLoader.

Streams real gzip dump files through the lxml row reader into a fake pyodbc
connection and checks bound values, batch boundaries, commits and rollback.
"""

from datetime import datetime

import pyodbc
import pytest

from helpers import badge_row, comment_row
from stackdump_loader.exceptions import (
    DatabaseError, MissingColumnError, SourceStreamError, UnknownColumnError, ValueParseError
)
from stackdump_loader.interfaces import RowReaderInterface
from stackdump_loader.models import SqlType
from stackdump_loader.processing.table_loader import (
    LoadState, TableLoader, build_binders, build_nullable_positions
)


@pytest.fixture
def loader(engine, connection):
    return TableLoader(engine, connection)


class TestBatchState:
    """Test the per-table nullable position and binder maps."""

    def test_nullable_positions(self, tables):
        positions = build_nullable_positions(tables["votes"])
        assert dict(positions) == {4: SqlType.INTEGER, 6: SqlType.INTEGER}

    def test_binders_cover_every_column(self, tables):
        binders = build_binders(tables["comments"])
        assert set(binders) == set(tables["comments"].column_names)

    def test_maps_are_read_only(self, tables):
        with pytest.raises(TypeError):
            build_binders(tables["badges"])["Extra"] = None
        with pytest.raises(TypeError):
            build_nullable_positions(tables["votes"])[1] = SqlType.INTEGER


class TestSuccessfulLoads:
    """Test rows reaching the database with the right values."""

    def test_badges_row_bound_positionally(self, loader, connection, tables, dump_writer):
        path = dump_writer("badges", [badge_row(1)])

        result = loader.load(tables["badges"], path)

        assert connection.inserted_rows == [(1, 2, "Teacher", datetime(2014, 5, 13), 3, True)]
        assert connection.batches[0][0] == (
            "insert into badges (id, user_id, name, date, class, tag_based) values (?, ?, ?, ?, ?, ?);"
        )
        assert result.rows_loaded == 1
        assert result.batches_committed == 1
        assert connection.commits == 1
        assert loader.state is LoadState.CLOSED

    def test_missing_nullable_attribute_binds_null(self, loader, connection, tables, dump_writer):
        path = dump_writer("comments", [comment_row(1, display_name="Alice"), comment_row(2)])

        loader.load(tables["comments"], path)

        first, second = connection.inserted_rows
        assert first[5] == "Alice"
        # Value from the previous row must not leak into the next one
        assert second[5] is None
        assert second[:5] == (2, 35314, 0, "not sure why this is getting downvoted",
                              datetime(2008, 9, 6, 8, 7, 10, 730000))
        assert second[6:] == (1, "CC BY-SA 2.5")

    def test_attribute_order_is_irrelevant(self, loader, connection, tables, dump_writer):
        reordered = dict(reversed(list(badge_row(1).items())))
        path = dump_writer("badges", [reordered])

        loader.load(tables["badges"], path)

        assert connection.inserted_rows == [(1, 2, "Teacher", datetime(2014, 5, 13), 3, True)]

    def test_commit_every_batch_size_rows(self, loader, connection, tables, dump_writer):
        path = dump_writer("badges", [badge_row(i) for i in range(1, 2050)])

        result = loader.load(tables["badges"], path)

        assert connection.batch_sizes == [1024, 1024, 1]
        assert connection.commits == 3
        assert result.batch_sizes == [1024, 1024, 1]
        assert result.rows_loaded == 2049
        assert [row[0] for row in connection.inserted_rows] == list(range(1, 2050))

    def test_no_empty_final_commit(self, loader, connection, tables, dump_writer):
        path = dump_writer("badges", [badge_row(i) for i in range(1, 2049)])

        result = loader.load(tables["badges"], path)

        assert connection.batch_sizes == [1024, 1024]
        assert result.batches_committed == 2

    def test_configurable_batch_size(self, engine, connection, tables, dump_writer):
        loader = TableLoader(engine, connection, batch_size=2)
        path = dump_writer("badges", [badge_row(i) for i in range(1, 6)])

        loader.load(tables["badges"], path)

        assert connection.batch_sizes == [2, 2, 1]

    def test_empty_dump(self, loader, connection, tables, dump_writer):
        path = dump_writer("votes", [])

        result = loader.load(tables["votes"], path)

        assert result.rows_loaded == 0
        assert connection.batches == []
        assert connection.commits == 0
        assert loader.state is LoadState.CLOSED

    def test_statement_cursor_released(self, loader, connection, tables, dump_writer):
        loader.load(tables["badges"], dump_writer("badges", [badge_row(1)]))
        assert all(cursor.closed for cursor in connection.cursors)

    def test_allow_missing_required(self, engine, connection, tables, dump_writer):
        row = badge_row(1)
        del row["Name"]
        loader = TableLoader(engine, connection, fail_on_missing_required=False)

        loader.load(tables["badges"], dump_writer("badges", [row]))

        assert connection.inserted_rows == [(1, 2, None, datetime(2014, 5, 13), 3, True)]


class TestFailedLoads:
    """Test that failures roll back, release resources and propagate."""

    def test_unknown_attribute_aborts_before_further_rows(self, loader, connection, tables, dump_writer):
        bad = dict(badge_row(2), Bogus="x")
        path = dump_writer("badges", [badge_row(1), bad, badge_row(3)])

        with pytest.raises(UnknownColumnError) as exc_info:
            loader.load(tables["badges"], path)

        assert exc_info.value.attribute_name == "Bogus"
        assert exc_info.value.row_number == 2
        assert exc_info.value.table_name == "badges"
        assert connection.batches == []
        assert connection.commits == 0
        assert connection.rollbacks == 1
        assert loader.state is LoadState.FAILED
        assert all(cursor.closed for cursor in connection.cursors)

    def test_committed_batches_survive_failure(self, engine, connection, tables, dump_writer):
        loader = TableLoader(engine, connection, batch_size=2)
        path = dump_writer("badges", [badge_row(1), badge_row(2), badge_row(3, tag_based="yes")])

        with pytest.raises(ValueParseError):
            loader.load(tables["badges"], path)

        assert connection.batch_sizes == [2]
        assert connection.commits == 1
        assert connection.rollbacks == 1

    def test_lowercase_boolean_rejected(self, loader, connection, tables, dump_writer):
        path = dump_writer("badges", [badge_row(1, tag_based="true")])

        with pytest.raises(ValueParseError) as exc_info:
            loader.load(tables["badges"], path)

        assert exc_info.value.column_name == "TagBased"
        assert exc_info.value.source_value == "true"
        assert exc_info.value.table_name == "badges"
        assert connection.rollbacks == 1
        assert connection.batches == []

    def test_missing_required_attribute(self, loader, connection, tables, dump_writer):
        row = badge_row(1)
        del row["Name"]
        del row["Date"]

        with pytest.raises(MissingColumnError) as exc_info:
            loader.load(tables["badges"], dump_writer("badges", [row]))

        assert exc_info.value.column_names == ["Date", "Name"]
        assert exc_info.value.row_number == 1
        assert connection.batches == []

    def test_missing_dump_file(self, loader, connection, tables, tmp_path):
        with pytest.raises(SourceStreamError):
            loader.load(tables["badges"], tmp_path / "badges.xml.gz")

        assert loader.state is LoadState.FAILED
        assert connection.rollbacks == 1

    def test_batch_rejected_by_database(self, loader, connection, tables, dump_writer):
        connection.fail_on_executemany = pyodbc.Error('ERROR: duplicate key value violates unique constraint')

        with pytest.raises(DatabaseError, match="Primary key violation"):
            loader.load(tables["badges"], dump_writer("badges", [badge_row(1), badge_row(1)]))

        assert connection.commits == 0
        assert connection.rollbacks == 1
        assert all(cursor.closed for cursor in connection.cursors)

    def test_commit_failure(self, loader, connection, tables, dump_writer):
        connection.fail_on_commit = pyodbc.Error("server closed the connection unexpectedly")

        with pytest.raises(DatabaseError, match="Commit failed"):
            loader.load(tables["badges"], dump_writer("badges", [badge_row(1)]))

        assert loader.state is LoadState.FAILED


class InMemoryReader(RowReaderInterface):
    """Row reader over attribute lists held in memory."""

    def __init__(self, rows):
        self._rows = rows
        self.opened = False
        self.closed = False

    def open(self):
        self.opened = True
        return self

    def close(self):
        self.closed = True

    def rows(self):
        yield from self._rows


def test_reader_factory_seam(engine, connection, tables):
    reader = InMemoryReader([[("Id", "9"), ("PostId", "4"), ("VoteTypeId", "2"), ("CreationDate", "2010-01-01T00:00:00")]])
    loader = TableLoader(engine, connection, reader_factory=lambda path, table_name: reader)

    result = loader.load(tables["votes"], "votes.xml.gz")

    assert connection.inserted_rows == [(9, 4, 2, None, datetime(2010, 1, 1), None)]
    assert result.rows_loaded == 1
    assert reader.opened and reader.closed


def test_progress_reported_with_injected_clock(engine, connection, tables, dump_writer, caplog):
    ticks = iter(range(100000))
    loader = TableLoader(engine, connection, progress_interval_seconds=10, clock=lambda: float(next(ticks)))

    with caplog.at_level("INFO", logger="stackdump_loader.monitoring.progress_monitor"):
        loader.load(tables["badges"], dump_writer("badges", [badge_row(i) for i in range(1, 46)]))

    progress_lines = [r for r in caplog.records if r.name == "stackdump_loader.monitoring.progress_monitor"]
    # Four throttled reports plus the final one
    assert len(progress_lines) == 5
    assert "Saved 45 rows" in progress_lines[-1].getMessage()


def test_invalid_batch_size(engine, connection):
    with pytest.raises(ValueError):
        TableLoader(engine, connection, batch_size=0)
