"""
Core data models for the Stack Exchange dump loader.

This module defines the schema descriptors (tables, columns, SQL types) that drive
DDL generation and value binding, and the result record produced by each table load.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple
from enum import Enum

from .exceptions import SchemaConfigError
from .utils import NameUtils


# Length sentinel for VARCHAR columns without an upper bound (emitted as "text")
UNBOUNDED: Optional[int] = None


class SqlType(Enum):
    """Supported column types of the dump tables."""
    BOOLEAN = "boolean"
    INTEGER = "integer"
    SMALLINT = "smallint"
    TIMESTAMP = "timestamp"
    VARCHAR = "varchar"


@dataclass(frozen=True)
class Column:
    """
    Describes one column of a dump table.

    Attributes:
        name: Source attribute name in PascalCase, matched case-sensitively against row attributes
        sql_type: Column type
        length: Upper bound for VARCHAR (UNBOUNDED for text), 0 for fixed-width types
        nullable: Whether the attribute may be absent from a row
    """
    name: str
    sql_type: SqlType
    length: Optional[int] = 0
    nullable: bool = False

    def __post_init__(self):
        """Validate column descriptor."""
        if not self.name:
            raise SchemaConfigError("Column name cannot be empty")
        if not isinstance(self.sql_type, SqlType):
            raise SchemaConfigError(f"Column '{self.name}' has unsupported sql_type: {self.sql_type!r}")
        # bool is an int subclass, so True would otherwise pass as a length of 1
        if isinstance(self.length, bool):
            raise SchemaConfigError(f"Column '{self.name}' length must be an integer, got {self.length!r}")
        if not isinstance(self.nullable, bool):
            raise SchemaConfigError(f"Column '{self.name}' nullable must be a bool, got {self.nullable!r}")
        if self.sql_type is SqlType.VARCHAR:
            if self.length is not UNBOUNDED and (not isinstance(self.length, int) or self.length <= 0):
                raise SchemaConfigError(f"Column '{self.name}' needs a positive length or UNBOUNDED, got {self.length!r}")
        elif self.length != 0:
            raise SchemaConfigError(f"Column '{self.name}' of type {self.sql_type.name} cannot carry a length")

    @classmethod
    def fixed(cls, name: str, sql_type: SqlType) -> 'Column':
        """Create a non-nullable fixed-width column."""
        return cls(name, sql_type)

    @classmethod
    def variable(cls, name: str, length: Optional[int]) -> 'Column':
        """Create a non-nullable VARCHAR column with the given bound (or UNBOUNDED)."""
        return cls(name, SqlType.VARCHAR, length)

    def with_nulls(self) -> 'Column':
        """Return a nullable copy of this column."""
        return replace(self, nullable=True)

    @property
    def pg_name(self) -> str:
        return NameUtils.to_snake_case(self.name)


@dataclass(frozen=True)
class Table:
    """
    Describes one dump table and the file it is loaded from.

    Column order defines both the DDL column order and the positional parameter
    binding of the insert statement.

    Attributes:
        name: Source table identifier (e.g. "postLinks"), also the dump file stem
        columns: Ordered, non-empty sequence of columns with unique names
    """
    name: str
    columns: Tuple[Column, ...]

    def __post_init__(self):
        """Validate table descriptor and freeze the column sequence."""
        if not self.name:
            raise SchemaConfigError("Table name cannot be empty")
        object.__setattr__(self, 'columns', tuple(self.columns))
        if not self.columns:
            raise SchemaConfigError(f"Table '{self.name}' must have at least one column", self.name)

        seen = set()
        for column in self.columns:
            if not isinstance(column, Column):
                raise SchemaConfigError(f"Table '{self.name}' contains a non-column entry: {column!r}", self.name)
            if column.name in seen:
                raise SchemaConfigError(f"Duplicate column '{column.name}' in table '{self.name}'", self.name)
            seen.add(column.name)

    @property
    def pg_name(self) -> str:
        return NameUtils.to_snake_case(self.name)

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    @property
    def required_column_names(self) -> frozenset:
        """Names of the non-nullable columns, which every row must carry."""
        return frozenset(column.name for column in self.columns if not column.nullable)

    @property
    def source_file_name(self) -> str:
        """Dump file name by convention, e.g. 'postLinks.xml.gz'."""
        return f"{self.name}.xml.gz"


def columns(table: Table) -> Tuple[Column, ...]:
    """Return the ordered columns of a table."""
    return table.columns


def name(table: Table) -> str:
    """Return the source name of a table."""
    return table.name


@dataclass
class LoadResult:
    """
    Results from loading one table.

    Attributes:
        table_name: Source table name
        rows_loaded: Number of rows committed to the database
        batches_committed: Number of drain (execute + commit) cycles
        processing_time_seconds: Wall-clock time of the load
        peak_memory_mb: Highest process RSS sampled during the load
    """
    table_name: str
    rows_loaded: int = 0
    batches_committed: int = 0
    processing_time_seconds: float = 0.0
    peak_memory_mb: float = 0.0
    batch_sizes: list = field(default_factory=list)

    @property
    def rows_per_second(self) -> float:
        """Average throughput of the load."""
        if self.processing_time_seconds <= 0:
            return 0.0
        return self.rows_loaded / self.processing_time_seconds
