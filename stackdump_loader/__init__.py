"""
Stack Exchange Dump Loader

Streams the gzip-compressed XML dump files of a Stack Exchange site export into
relational tables, with typed value parsing and periodic batched commits.
"""

__version__ = "1.0.0"

# Import core models and interfaces for easy access
from .models import (
    UNBOUNDED,
    SqlType,
    Column,
    Table,
    LoadResult
)

from .interfaces import (
    RowReaderInterface,
    StatementInterface,
    TableLoaderInterface
)

from .exceptions import (
    DumpLoaderError,
    SchemaConfigError,
    ConfigurationError,
    UnknownColumnError,
    MissingColumnError,
    ValueParseError,
    SourceStreamError,
    XMLParsingError,
    DatabaseError,
    DatabaseConnectionError
)

__all__ = [
    # Core models
    "UNBOUNDED",
    "SqlType",
    "Column",
    "Table",
    "LoadResult",

    # Interfaces
    "RowReaderInterface",
    "StatementInterface",
    "TableLoaderInterface",

    # Exceptions
    "DumpLoaderError",
    "SchemaConfigError",
    "ConfigurationError",
    "UnknownColumnError",
    "MissingColumnError",
    "ValueParseError",
    "SourceStreamError",
    "XMLParsingError",
    "DatabaseError",
    "DatabaseConnectionError"
]
