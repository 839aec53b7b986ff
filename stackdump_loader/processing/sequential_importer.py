"""
Sequential Importer - Per-table run driver.

Creates each configured table and loads it from its dump file, one table after
another over a single connection. The run stops at the first error; tables loaded
before it stay in the database.
"""

import logging
import time

from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from ..database.migration_engine import MigrationEngine
from ..exceptions import ConfigurationError, DumpLoaderError
from ..models import LoadResult, Table
from .table_loader import TableLoader


def select_tables(tables: Sequence[Table], names: Optional[Iterable[str]]) -> List[Table]:
    """
    Restrict a catalogue to the named tables, keeping catalogue order.

    Names match either the dump name (``postLinks``) or the database name
    (``post_links``). None keeps every table.

    Raises:
        ConfigurationError: If a name matches no table, or the names are all blank
    """
    if names is None:
        return list(tables)

    wanted = {name.strip() for name in names if name.strip()}
    if not wanted:
        raise ConfigurationError("No table names given")
    known = {table.name for table in tables} | {table.pg_name for table in tables}
    unknown = sorted(wanted - known)
    if unknown:
        raise ConfigurationError(
            f"Unknown table(s): {', '.join(unknown)}. "
            f"Available: {', '.join(table.name for table in tables)}"
        )

    return [table for table in tables if table.name in wanted or table.pg_name in wanted]


class SequentialImporter:
    """
    Loads a catalogue of tables one at a time.

    For each table the CREATE statement is executed and committed, then the table
    loader streams the dump file into it.
    """

    def __init__(self,
                 engine: MigrationEngine,
                 connection,
                 tables: Sequence[Table],
                 source_path_for: Callable[[Table], Path],
                 batch_size: int = 1024,
                 progress_interval_seconds: float = 1.0,
                 fail_on_missing_required: bool = True,
                 loader: Optional[TableLoader] = None):
        """
        Initialize the sequential importer.

        Args:
            engine: Database collaborator
            connection: Open connection shared by all tables of the run
            tables: Tables to load, in load order
            source_path_for: Resolves a table to its dump file
            batch_size: Rows per commit
            progress_interval_seconds: Minimum time between progress reports
            fail_on_missing_required: Reject rows that omit a non-nullable column
            loader: Table loader to use instead of a default one
        """
        self.logger = logging.getLogger(__name__)
        self.engine = engine
        self.connection = connection
        self.tables = list(tables)
        self.source_path_for = source_path_for
        self.loader = loader or TableLoader(
            engine,
            connection,
            batch_size=batch_size,
            progress_interval_seconds=progress_interval_seconds,
            fail_on_missing_required=fail_on_missing_required,
        )

    def run(self) -> List[LoadResult]:
        """
        Create and load every table.

        Returns:
            One LoadResult per table, in load order

        Raises:
            DumpLoaderError: The first error of the run, after the failing table was rolled back
        """
        results: List[LoadResult] = []
        start_time = time.time()
        self.logger.info(f"Starting import of {len(self.tables)} tables")

        for table in self.tables:
            source_path = self.source_path_for(table)
            try:
                self.engine.create_table(self.connection, table)
                results.append(self.loader.load(table, source_path))
            except DumpLoaderError as e:
                self.logger.error(
                    f"Import stopped at table '{table.name}' after {len(results)} completed tables: {e}"
                )
                raise

        total_rows = sum(result.rows_loaded for result in results)
        self.logger.info(
            f"Imported {total_rows:,} rows into {len(results)} tables in {time.time() - start_time:.2f}s"
        )
        return results
