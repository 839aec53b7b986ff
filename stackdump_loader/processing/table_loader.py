"""
Streaming Table Loader - Dump File to Batched Inserts

Core of the dump loader. Streams one table's dump file row by row, binds each row's
attributes into the positional parameters of the table's insert statement, and
commits every ``batch_size`` rows so transaction size and memory stay bounded no
matter how large the file is.

States of one load:

    OPENING -> STREAMING <-> DRAINING -> CLOSED
        any state -> FAILED

Per row, every nullable position is reset to null first, then each attribute is
resolved by name to its binder. Attribute order within a row is irrelevant.
"""

import logging
import time

from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Callable, List, Mapping, Tuple

from ..database.migration_engine import MigrationEngine
from ..exceptions import DumpLoaderError, MissingColumnError, UnknownColumnError
from ..interfaces import RowReaderInterface, StatementInterface, TableLoaderInterface
from ..mapping.type_mapping import Binder, make_binder
from ..models import LoadResult, SqlType, Table
from ..monitoring.progress_monitor import ProgressMonitor
from ..parsing.xml_parser import RowReader


class LoadState(Enum):
    """Lifecycle states of a single table load."""
    OPENING = "opening"
    STREAMING = "streaming"
    DRAINING = "draining"
    CLOSED = "closed"
    FAILED = "failed"


def build_nullable_positions(table: Table) -> Mapping[int, SqlType]:
    """
    Map the 1-based parameter position of every nullable column to its SQL type.

    Returns:
        Read-only mapping, built once per table
    """
    return MappingProxyType({
        position: column.sql_type
        for position, column in enumerate(table.columns, 1)
        if column.nullable
    })


def build_binders(table: Table) -> Mapping[str, Binder]:
    """
    Map every column's source attribute name to a binder for its parameter position.

    Returns:
        Read-only mapping, built once per table
    """
    return MappingProxyType({
        column.name: make_binder(column, position)
        for position, column in enumerate(table.columns, 1)
    })


class TableLoader(TableLoaderInterface):
    """
    Loads one table at a time from its dump file over a shared connection.

    The loader never retries, skips rows or substitutes defaults. Any failure rolls
    back the uncommitted batch, releases the reader and statement and propagates;
    batches committed before the failure stay in the database.
    """

    def __init__(self,
                 engine: MigrationEngine,
                 connection,
                 batch_size: int = 1024,
                 progress_interval_seconds: float = 1.0,
                 fail_on_missing_required: bool = True,
                 reader_factory: Callable[[Path, str], RowReaderInterface] = RowReader,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize the table loader.

        Args:
            engine: Database collaborator used to prepare, commit and roll back
            connection: Open connection with autocommit disabled, reused across tables
            batch_size: Rows per drain (execute + commit)
            progress_interval_seconds: Minimum time between progress reports
            fail_on_missing_required: Reject rows that omit a non-nullable column
            reader_factory: Builds the row reader for a dump file
            clock: Monotonic time source, shared with the progress monitor
        """
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")

        self.logger = logging.getLogger(__name__)
        self.engine = engine
        self.connection = connection
        self.batch_size = batch_size
        self.progress_interval_seconds = progress_interval_seconds
        self.fail_on_missing_required = fail_on_missing_required
        self.reader_factory = reader_factory
        self.clock = clock

        self.state = LoadState.CLOSED

    def load(self, table: Table, source_path: Path) -> LoadResult:
        """
        Stream a dump file into its table, committing every batch_size rows.

        A final drain commits the last partial batch at end of input.

        Args:
            table: Table descriptor
            source_path: Path of the table's .xml.gz dump file

        Returns:
            LoadResult with committed rows, batch sizes and throughput

        Raises:
            UnknownColumnError: If a row carries an attribute with no column
            MissingColumnError: If a row omits a non-nullable column (when enabled)
            ValueParseError: If attribute text does not parse as its column type
            SourceStreamError: If the dump file cannot be read
            DatabaseError: If executing or committing a batch fails
        """
        self.state = LoadState.OPENING
        self.logger.info(f"Inserting table for '{table.name}' from {source_path}")

        result = LoadResult(table_name=table.name)
        monitor = ProgressMonitor(self.progress_interval_seconds, clock=self.clock, table_name=table.name)
        statement = None

        try:
            nullable_positions = build_nullable_positions(table)
            binders = build_binders(table)
            required_names = table.required_column_names if self.fail_on_missing_required else frozenset()

            with self.reader_factory(source_path, table.name) as reader:
                statement = self.engine.prepare_insert(self.connection, table)
                self.state = LoadState.STREAMING

                for attributes in reader.rows():
                    row_number = monitor.count + 1
                    self._bind_row(statement, attributes, nullable_positions, binders,
                                   required_names, table, row_number)
                    statement.add_to_batch()

                    if monitor.increment() % self.batch_size == 0:
                        self._drain(statement, table, result)

                # Final partial batch
                self._drain(statement, table, result)

            monitor.report()

        except Exception as e:
            self.state = LoadState.FAILED
            if isinstance(e, DumpLoaderError) and e.table_name is None:
                e.table_name = table.name
            self._abort(statement, table, monitor, e)
            raise
        finally:
            if statement is not None:
                statement.close()

        result.processing_time_seconds = monitor.elapsed_seconds
        result.peak_memory_mb = monitor.peak_memory_mb
        self.state = LoadState.CLOSED

        self.logger.info(
            f"Loaded {result.rows_loaded:,} rows into {table.pg_name} in {result.batches_committed} batches "
            f"({result.processing_time_seconds:.2f}s, {result.rows_per_second:.0f} rows/s)"
        )
        return result

    def _bind_row(self,
                  statement: StatementInterface,
                  attributes: List[Tuple[str, str]],
                  nullable_positions: Mapping[int, SqlType],
                  binders: Mapping[str, Binder],
                  required_names: frozenset,
                  table: Table,
                  row_number: int) -> None:
        """Reset nullable positions and bind one row's attributes by name."""
        for position, sql_type in nullable_positions.items():
            statement.bind_null(position, sql_type)

        for attribute_name, raw_value in attributes:
            binder = binders.get(attribute_name)
            if binder is None:
                raise UnknownColumnError(
                    f"Row {row_number} of '{table.name}' has attribute '{attribute_name}' with no matching column",
                    attribute_name=attribute_name,
                    row_number=row_number,
                    table_name=table.name,
                )
            binder(statement, raw_value)

        if required_names:
            missing = required_names.difference(name for name, _ in attributes)
            if missing:
                raise MissingColumnError(
                    f"Row {row_number} of '{table.name}' is missing required attributes: {sorted(missing)}",
                    column_names=missing,
                    row_number=row_number,
                    table_name=table.name,
                )

    def _drain(self, statement: StatementInterface, table: Table, result: LoadResult) -> None:
        """Execute the pending batch and commit it as one transaction."""
        self.state = LoadState.DRAINING

        sent = statement.execute_batch()
        if sent:
            self.engine.commit(self.connection, table.name)
            result.rows_loaded += sent
            result.batches_committed += 1
            result.batch_sizes.append(sent)
            self.logger.debug(f"Committed batch {result.batches_committed} ({sent} rows) into {table.pg_name}")

        self.state = LoadState.STREAMING

    def _abort(self, statement, table: Table, monitor: ProgressMonitor, error: Exception) -> None:
        """Discard the uncommitted batch and roll back the active transaction."""
        dropped = statement.discard_batch() if statement is not None else 0
        self.engine.rollback(self.connection)
        self.logger.error(
            f"Load of '{table.name}' failed after {monitor.count:,} rows "
            f"({dropped} uncommitted rows discarded): {error}"
        )
