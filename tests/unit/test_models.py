"""
Unit tests for the schema descriptors and load results.
"""

import pytest

from stackdump_loader.exceptions import SchemaConfigError
from stackdump_loader.models import (
    UNBOUNDED, Column, LoadResult, SqlType, Table, columns, name
)


class TestColumn:
    """Test Column construction and validation."""

    def test_fixed_column_defaults(self):
        column = Column.fixed("CreationDate", SqlType.TIMESTAMP)

        assert column.length == 0
        assert column.nullable is False
        assert column.pg_name == "creation_date"

    def test_variable_column(self):
        column = Column.variable("DisplayName", 40)

        assert column.sql_type is SqlType.VARCHAR
        assert column.length == 40

    def test_unbounded_variable_column(self):
        assert Column.variable("Body", UNBOUNDED).length is UNBOUNDED

    def test_with_nulls_returns_nullable_copy(self):
        column = Column.variable("Location", 100)
        nullable = column.with_nulls()

        assert nullable.nullable is True
        assert column.nullable is False
        assert nullable.name == column.name and nullable.length == column.length

    def test_columns_are_immutable(self):
        column = Column.fixed("Id", SqlType.INTEGER)
        with pytest.raises(AttributeError):
            column.name = "Other"

    @pytest.mark.parametrize("length", [0, -5])
    def test_varchar_requires_positive_length(self, length):
        with pytest.raises(SchemaConfigError):
            Column("Name", SqlType.VARCHAR, length)

    def test_fixed_width_type_rejects_length(self):
        with pytest.raises(SchemaConfigError):
            Column("Id", SqlType.INTEGER, 10)

    @pytest.mark.parametrize("sql_type, length", [(SqlType.VARCHAR, True), (SqlType.INTEGER, False)])
    def test_boolean_length_rejected(self, sql_type, length):
        with pytest.raises(SchemaConfigError, match="length must be an integer"):
            Column("Name", sql_type, length)

    def test_non_boolean_nullable_rejected(self):
        with pytest.raises(SchemaConfigError, match="nullable must be a bool"):
            Column("Name", SqlType.VARCHAR, 50, "false")

    def test_empty_name_rejected(self):
        with pytest.raises(SchemaConfigError):
            Column.fixed("", SqlType.INTEGER)

    def test_unknown_type_rejected(self):
        with pytest.raises(SchemaConfigError):
            Column("Id", "integer")


class TestTable:
    """Test Table construction and derived names."""

    def _table(self):
        return Table("postLinks", [
            Column.fixed("Id", SqlType.INTEGER),
            Column.fixed("CreationDate", SqlType.TIMESTAMP),
            Column.fixed("LinkTypeId", SqlType.SMALLINT).with_nulls(),
        ])

    def test_derived_names(self):
        table = self._table()

        assert table.pg_name == "post_links"
        assert table.source_file_name == "postLinks.xml.gz"
        assert table.column_names == ("Id", "CreationDate", "LinkTypeId")
        assert table.required_column_names == frozenset({"Id", "CreationDate"})

    def test_columns_frozen_to_tuple(self):
        assert isinstance(self._table().columns, tuple)

    def test_accessors(self):
        table = self._table()

        assert name(table) == "postLinks"
        assert columns(table) == table.columns

    def test_empty_table_rejected(self):
        with pytest.raises(SchemaConfigError):
            Table("empty", ())

    def test_duplicate_column_rejected(self):
        with pytest.raises(SchemaConfigError, match="Duplicate column 'Id'"):
            Table("dupes", (Column.fixed("Id", SqlType.INTEGER), Column.variable("Id", 10)))

    def test_non_column_entry_rejected(self):
        with pytest.raises(SchemaConfigError):
            Table("bad", (Column.fixed("Id", SqlType.INTEGER), "Name"))


class TestLoadResult:
    """Test LoadResult throughput."""

    def test_rows_per_second(self):
        result = LoadResult("badges", rows_loaded=2048, processing_time_seconds=2.0)
        assert result.rows_per_second == 1024.0

    def test_rows_per_second_without_elapsed_time(self):
        assert LoadResult("badges", rows_loaded=10).rows_per_second == 0.0
