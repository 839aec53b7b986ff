"""
Prepared Insert - Positional Parameter Buffer with Batched Execution

Wraps a pyodbc cursor and a parameterized INSERT statement. Values are bound into a
reusable positional buffer, snapshotted into the pending batch per row, and sent to
the database with a single executemany call per drain.
"""

import logging
import pyodbc

from typing import Any, List, Optional, Tuple

from ..exceptions import DatabaseError
from ..interfaces import StatementInterface
from ..models import SqlType


class PreparedInsert(StatementInterface):
    """
    Positional parameter binding on top of a pyodbc cursor.

    Positions are 1-based, matching the placeholder order of the insert statement.
    The buffer is never cleared between rows: callers bind null for every nullable
    position before applying a row's attributes.
    """

    def __init__(self, cursor, sql: str, parameter_count: int, table_name: str = None,
                 fast_executemany: bool = True, logger: logging.Logger = None):
        """
        Initialize prepared insert.

        Args:
            cursor: Active pyodbc cursor, owned by this object from now on
            sql: Parameterized INSERT statement using qmark placeholders
            parameter_count: Number of placeholders in the statement
            table_name: Table name (for error messages)
            fast_executemany: Whether to enable pyodbc's array binding for executemany
            logger: Optional logger instance
        """
        self.cursor = cursor
        self.sql = sql
        self.parameter_count = parameter_count
        self.table_name = table_name
        self.logger = logger or logging.getLogger(__name__)

        self._parameters: List[Any] = [None] * parameter_count
        self._batch: List[Tuple[Any, ...]] = []
        self._closed = False

        # Enable fast_executemany for performance
        self.cursor.fast_executemany = fast_executemany

    def bind(self, position: int, value: Any) -> None:
        """Bind a value at a 1-based parameter position."""
        self._parameters[position - 1] = value

    def bind_null(self, position: int, sql_type: Optional[SqlType] = None) -> None:
        """Bind SQL null at a 1-based parameter position."""
        self._parameters[position - 1] = None

    def add_to_batch(self) -> None:
        """Snapshot the current parameter buffer into the pending batch."""
        self._batch.append(tuple(self._parameters))

    def execute_batch(self) -> int:
        """
        Send the pending batch to the database and clear it.

        Returns:
            Number of rows sent

        Raises:
            DatabaseError: If the database rejects the batch
        """
        if not self._batch:
            return 0

        batch_size = len(self._batch)
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(f"Executing batch of {batch_size} rows into {self.table_name}")

        try:
            self.cursor.executemany(self.sql, self._batch)
        except pyodbc.Error as e:
            self._handle_database_error(e)
        finally:
            self._batch = []

        return batch_size

    def discard_batch(self) -> int:
        """Drop the pending batch without executing it."""
        dropped = len(self._batch)
        self._batch = []
        return dropped

    def close(self) -> None:
        """Release the underlying cursor. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._batch = []
        try:
            self.cursor.close()
        except pyodbc.Error as e:
            self.logger.warning(f"Failed to close cursor for {self.table_name}: {e}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def _handle_database_error(self, e: Exception) -> None:
        """
        Categorize and re-raise database errors as DatabaseError.

        Raises:
            DatabaseError: Always
        """
        error_str = str(e).lower()

        if 'duplicate key' in error_str or 'unique constraint' in error_str:
            error_msg = f"Primary key violation in {self.table_name}: {e}"
        elif 'not-null constraint' in error_str or 'not null constraint' in error_str:
            error_msg = f"NULL constraint violation in {self.table_name}: {e}"
        elif 'value too long' in error_str or 'right truncation' in error_str:
            error_msg = f"Value exceeds column length in {self.table_name}: {e}"
        else:
            error_msg = f"Database error during batch insert into {self.table_name}: {e}"

        self.logger.error(error_msg)
        raise DatabaseError(error_msg, self.table_name)
