"""
Migration Engine - Connection and Statement Lifecycle for Dump Loading

Owns the single pyodbc connection used for a run and the operations the table loader
needs from it: executing CREATE TABLE statements, preparing positional inserts and
committing or rolling back the active transaction.

The connection is opened with autocommit disabled. Every drain of the table loader
commits explicitly, so each batch is one transaction; anything not yet committed is
rolled back when a load fails.
"""

import logging
import pyodbc

from contextlib import contextmanager

from ..exceptions import DatabaseConnectionError, DatabaseError
from ..models import Table
from .prepared_insert import PreparedInsert
from .statement_builder import create_statement, insert_statement


class MigrationEngine:
    """
    Database collaborator of the dump loader.

    Provides connection management with automatic cleanup and the statement-level
    operations used per table: create, prepare, commit and rollback.
    """

    def __init__(self, connection_string: str, connection_timeout: int = 30,
                 fast_executemany: bool = True):
        """
        Initialize the migration engine.

        Args:
            connection_string: ODBC connection string of the target database
            connection_timeout: Login timeout in seconds
            fast_executemany: Whether prepared inserts use pyodbc's array binding
        """
        self.logger = logging.getLogger(__name__)
        self.connection_string = connection_string
        self.connection_timeout = connection_timeout
        self.fast_executemany = fast_executemany

        self.logger.debug(f"MigrationEngine initialized (fast_executemany={fast_executemany})")

    @contextmanager
    def get_connection(self):
        """
        Context manager for the run's database connection with automatic cleanup.

        Yields:
            pyodbc.Connection: Active connection with autocommit disabled

        Raises:
            DatabaseConnectionError: If connection cannot be established
        """
        try:
            connection = pyodbc.connect(
                self.connection_string,
                autocommit=False,  # Explicit transaction control, one commit per batch
                timeout=self.connection_timeout
            )
        except pyodbc.Error as e:
            self.logger.error(f"Database connection failed: {e}")
            raise DatabaseConnectionError(f"Failed to connect to database: {e}")

        connection.setdecoding(pyodbc.SQL_CHAR, encoding='utf-8')
        connection.setdecoding(pyodbc.SQL_WCHAR, encoding='utf-8')
        connection.setencoding(encoding='utf-8')

        try:
            yield connection
        finally:
            try:
                connection.close()
            except pyodbc.Error as e:
                self.logger.warning(f"Error while closing database connection: {e}")

    def create_table(self, connection, table: Table) -> None:
        """
        Execute the table's CREATE TABLE IF NOT EXISTS statement and commit it.

        Args:
            connection: Active database connection
            table: Table descriptor

        Raises:
            DatabaseError: If the DDL fails
        """
        sql = create_statement(table)
        self.logger.info(f"Creating table for '{table.name}'")
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(f"SQL: {sql}")

        cursor = connection.cursor()
        try:
            cursor.execute(sql)
            connection.commit()
        except pyodbc.Error as e:
            self.rollback(connection)
            error_msg = f"Failed to create table {table.pg_name}: {e}"
            self.logger.error(error_msg)
            raise DatabaseError(error_msg, table.name)
        finally:
            cursor.close()

    def prepare_insert(self, connection, table: Table) -> PreparedInsert:
        """
        Prepare the positional insert statement for a table.

        Args:
            connection: Active database connection
            table: Table descriptor

        Returns:
            PreparedInsert owning a fresh cursor; callers must close it
        """
        sql = insert_statement(table)
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(f"SQL: {sql}")

        try:
            cursor = connection.cursor()
        except pyodbc.Error as e:
            raise DatabaseError(f"Failed to open cursor for {table.pg_name}: {e}", table.name)

        return PreparedInsert(
            cursor,
            sql,
            len(table.columns),
            table_name=table.name,
            fast_executemany=self.fast_executemany,
        )

    def commit(self, connection, table_name: str = None) -> None:
        """
        Commit the active transaction.

        Raises:
            DatabaseError: If the commit fails
        """
        try:
            connection.commit()
        except pyodbc.Error as e:
            error_msg = f"Commit failed for {table_name}: {e}"
            self.logger.error(error_msg)
            raise DatabaseError(error_msg, table_name)

    def rollback(self, connection) -> None:
        """Roll back the active transaction without masking the error that caused it."""
        try:
            connection.rollback()
            self.logger.debug("Transaction rolled back")
        except pyodbc.Error as rollback_error:
            self.logger.critical(f"ROLLBACK FAILED - Database may be in inconsistent state: {rollback_error}")
