"""
Abstract interfaces for the dump loader.

This module defines the narrow contracts the table loader relies on for its
collaborators, so the decompression/tokenizer and the database statement can be
replaced (for example by in-memory fakes in tests).
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterator, List, Optional, Tuple

from .models import LoadResult, SqlType, Table


class RowReaderInterface(ABC):
    """Abstract interface for forward-only readers of dump row elements."""

    @abstractmethod
    def open(self) -> 'RowReaderInterface':
        """
        Acquire the underlying byte stream.

        Raises:
            SourceStreamError: If the source cannot be opened
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the underlying byte stream."""
        pass

    @abstractmethod
    def rows(self) -> Iterator[List[Tuple[str, str]]]:
        """
        Yield the attribute (name, value) pairs of each row element in document order.

        Raises:
            SourceStreamError: If reading fails
        """
        pass

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class StatementInterface(ABC):
    """Abstract interface for a prepared positional insert with batch execution."""

    @abstractmethod
    def bind(self, position: int, value: Any) -> None:
        """Bind a parsed value at a 1-based position."""
        pass

    @abstractmethod
    def bind_null(self, position: int, sql_type: Optional[SqlType] = None) -> None:
        """Bind SQL null at a 1-based position."""
        pass

    @abstractmethod
    def add_to_batch(self) -> None:
        """Append the currently bound parameters to the pending batch."""
        pass

    @abstractmethod
    def execute_batch(self) -> int:
        """
        Execute and clear the pending batch.

        Returns:
            Number of rows sent to the database
        """
        pass

    @abstractmethod
    def discard_batch(self) -> int:
        """Drop the pending batch without executing it."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the statement's resources."""
        pass


class TableLoaderInterface(ABC):
    """Abstract interface for loading one table from its dump file."""

    @abstractmethod
    def load(self, table: Table, source_path: Path) -> LoadResult:
        """
        Stream a dump file into its table, committing in batches.

        Args:
            table: Table descriptor
            source_path: Path of the table's dump file

        Returns:
            LoadResult with row and batch counts
        """
        pass
