"""Shared fixtures for dump loader tests."""

import logging

import pytest

from helpers import DummyConnection, write_dump_file
from stackdump_loader.database.migration_engine import MigrationEngine
from stackdump_loader.schema import stack_exchange_tables


@pytest.fixture
def connection():
    """Create a fake database connection."""
    return DummyConnection()


@pytest.fixture
def engine():
    """Create a migration engine that is never asked to connect."""
    return MigrationEngine("DRIVER={PostgreSQL Unicode};SERVER=localhost;DATABASE=test;")


@pytest.fixture
def tables():
    """Built-in table catalogue keyed by table name."""
    return {table.name: table for table in stack_exchange_tables()}


@pytest.fixture
def dump_writer(tmp_path):
    """Write dump files into a temporary dump root, named after their table."""
    def _write(table_name, rows):
        return write_dump_file(tmp_path / f"{table_name}.xml.gz", rows, root_tag=table_name)
    return _write


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo CLI logging setup so caplog sees package records in every test."""
    yield
    package_logger = logging.getLogger("stackdump_loader")
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)
