"""Database access: statement text, prepared inserts and connection lifecycle."""

from .statement_builder import create_statement, insert_statement
from .prepared_insert import PreparedInsert
from .migration_engine import MigrationEngine

__all__ = ['create_statement', 'insert_statement', 'PreparedInsert', 'MigrationEngine']
