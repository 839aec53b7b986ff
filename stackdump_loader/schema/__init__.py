"""Table catalogues for the dump loader."""

from .stack_exchange import stack_exchange_tables
from .schema_file import parse_schema_document, load_schema_file

__all__ = ['stack_exchange_tables', 'parse_schema_document', 'load_schema_file']
