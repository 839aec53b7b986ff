"""
Custom exceptions for the Stack Exchange dump loader.

This module defines specific exception types for the error conditions that can
occur while streaming dump files into the database. None of them are recovered
locally: any of them aborts the current table and the run.
"""


class DumpLoaderError(Exception):
    """Base exception for all dump loading related errors."""

    def __init__(self, message: str, table_name: str = None):
        """
        Initialize dump loader error.

        Args:
            message: Error description
            table_name: Optional name of the table being loaded when the error occurred
        """
        super().__init__(message)
        self.table_name = table_name


class SchemaConfigError(DumpLoaderError):
    """Exception raised when a table or column descriptor is malformed."""
    pass


class ConfigurationError(DumpLoaderError):
    """Exception raised when runtime configuration is invalid or missing."""
    pass


class UnknownColumnError(DumpLoaderError):
    """Exception raised when a row carries an attribute with no matching column."""

    def __init__(self, message: str, attribute_name: str = None, row_number: int = None,
                 table_name: str = None):
        """
        Initialize unknown column error.

        Args:
            message: Error description
            attribute_name: Attribute name that has no binder
            row_number: 1-based number of the offending row within the table
            table_name: Optional name of the table being loaded
        """
        super().__init__(message, table_name)
        self.attribute_name = attribute_name
        self.row_number = row_number


class MissingColumnError(DumpLoaderError):
    """Exception raised when a row omits the attribute of a non-nullable column."""

    def __init__(self, message: str, column_names=None, row_number: int = None,
                 table_name: str = None):
        super().__init__(message, table_name)
        self.column_names = sorted(column_names or [])
        self.row_number = row_number


class ValueParseError(DumpLoaderError):
    """Exception raised when attribute text cannot be parsed into its column type."""

    def __init__(self, message: str, column_name: str = None, source_value: str = None,
                 target_type: str = None, table_name: str = None):
        """
        Initialize value parse error.

        Args:
            message: Error description
            column_name: Name of the column that failed parsing
            source_value: Original attribute text (truncated for logging)
            target_type: Target SQL type name
            table_name: Optional name of the table being loaded
        """
        super().__init__(message, table_name)
        self.column_name = column_name
        # Store truncated value for debugging (first 100 chars)
        self.source_value = source_value[:100] + "..." if source_value and len(source_value) > 100 else source_value
        self.target_type = target_type


class SourceStreamError(DumpLoaderError):
    """Exception raised when a dump file cannot be opened, read or decompressed."""

    def __init__(self, message: str, source_path: str = None, table_name: str = None):
        super().__init__(message, table_name)
        self.source_path = source_path


class XMLParsingError(SourceStreamError):
    """Exception raised when the decompressed dump is not well-formed XML."""
    pass


class DatabaseError(DumpLoaderError):
    """Exception raised when DDL, DML or commit fails in the database."""
    pass


class DatabaseConnectionError(DatabaseError):
    """Exception raised when database connection fails."""
    pass
