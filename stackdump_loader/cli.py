"""
Command-line interface for the Stack Exchange dump loader.

Loads the dump files of a Stack Exchange site export into a PostgreSQL database,
one table after another:

    stackdump_loader --dump-root /data/so --database so --username so --password so
    stackdump_loader --dump-root /data/so --tables badges,users --batch-size 4096
    stackdump_loader --dry-run
"""

import argparse
import logging
import sys

from pathlib import Path
from typing import List, Optional

from . import __version__
from .config.config_manager import ConfigManager, ENV_PREFIX
from .config.processing_defaults import ProcessingDefaults
from .database.migration_engine import MigrationEngine
from .database.statement_builder import create_statement
from .exceptions import DumpLoaderError
from .models import LoadResult
from .processing.sequential_importer import SequentialImporter, select_tables


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stackdump_loader",
        description="Load Stack Exchange XML dump files into a relational database",
        epilog=f"Settings not given on the command line are read from {ENV_PREFIX}* environment variables.",
    )

    parser.add_argument("--dump-root", help="Directory holding the <table>.xml.gz dump files (default: cwd)")

    # Database endpoint
    parser.add_argument("--connection-string", help="Full ODBC connection string (overrides the options below)")
    parser.add_argument("--driver", help=f"ODBC driver name (default: {ProcessingDefaults.DB_DRIVER})")
    parser.add_argument("--server", help=f"Database host (default: {ProcessingDefaults.DB_SERVER})")
    parser.add_argument("--port", type=int, help=f"Database port (default: {ProcessingDefaults.DB_PORT})")
    parser.add_argument("--database", help=f"Database name (default: {ProcessingDefaults.DB_DATABASE})")
    parser.add_argument("--username", help=f"Database user (default: {ProcessingDefaults.DB_USERNAME})")
    parser.add_argument("--password", help="Database password")

    # Processing
    parser.add_argument("--batch-size", type=int,
                        help=f"Rows per commit (default: {ProcessingDefaults.BATCH_SIZE})")
    parser.add_argument("--tables", nargs="+",
                        help="Load only these tables, by dump or database name (comma or space separated)")
    parser.add_argument("--schema", help="JSON or YAML table catalogue to use instead of the built-in one")
    parser.add_argument("--allow-missing-required", action="store_true",
                        help="Do not reject rows that omit the attribute of a non-nullable column")
    parser.add_argument("--dry-run", action="store_true",
                        help="Print the CREATE TABLE statements and exit without connecting")

    # Logging
    parser.add_argument("--log-level", default=ProcessingDefaults.LOG_LEVEL,
                        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
                        help=f"Logging level (default: {ProcessingDefaults.LOG_LEVEL})")
    parser.add_argument("--log-file",
                        help=f"Also write the log to this file (bare names go under {ProcessingDefaults.LOG_DIR}/)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def _setup_logging(log_level: str, log_file: Optional[str] = None) -> logging.Logger:
    """Configure console and optional file logging for the package loggers."""
    level = getattr(logging, log_level.upper())
    formatter = logging.Formatter(LOG_FORMAT)

    package_logger = logging.getLogger("stackdump_loader")
    package_logger.setLevel(level)
    package_logger.propagate = False

    # Remove any existing handlers to avoid duplicates
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        if log_path.parent == Path('.'):
            log_path = Path(ProcessingDefaults.LOG_DIR) / log_path
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    # Suppress noisy third-party loggers
    logging.getLogger('lxml').setLevel(logging.WARNING)

    return logging.getLogger(__name__)


def _split_table_names(values: Optional[List[str]]) -> Optional[List[str]]:
    if values is None:
        return None
    return [name for value in values for name in value.split(',') if name.strip()]


def _log_summary(logger: logging.Logger, results: List[LoadResult]) -> None:
    logger.info("=== Load Summary ===")
    for result in results:
        logger.info(
            f"  {result.table_name}: {result.rows_loaded:,} rows, {result.batches_committed} batches, "
            f"{result.processing_time_seconds:.2f}s ({result.rows_per_second:.0f} rows/s), "
            f"peak memory {result.peak_memory_mb:.1f} MB"
        )
    total_rows = sum(result.rows_loaded for result in results)
    total_seconds = sum(result.processing_time_seconds for result in results)
    logger.info(f"  Total: {total_rows:,} rows in {len(results)} tables, {total_seconds:.2f}s")


def main(args: Optional[list] = None) -> int:
    """
    Main entry point for the CLI application.

    Args:
        args: Optional command line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, 1 for any error)
    """
    parsed = build_parser().parse_args(args)
    logger = _setup_logging(parsed.log_level, parsed.log_file)

    try:
        config_manager = ConfigManager(parsed.dump_root)
        config_manager.apply_overrides(
            connection_string=parsed.connection_string,
            driver=parsed.driver,
            server=parsed.server,
            port=parsed.port,
            database=parsed.database,
            username=parsed.username,
            password=parsed.password,
            batch_size=parsed.batch_size,
            fail_on_missing_required=False if parsed.allow_missing_required else None,
            schema_path=parsed.schema,
        )

        tables = select_tables(config_manager.load_tables(), _split_table_names(parsed.tables))

        if parsed.dry_run:
            for table in tables:
                print(create_statement(table))
            return 0

        config_manager.validate_configuration(tables)
        summary = config_manager.get_configuration_summary()
        logger.info(f"stackdump_loader {__version__}")
        logger.info(f"Database: {summary['database']['server']}:{summary['database']['port']}/"
                    f"{summary['database']['database']}")
        logger.info(f"Dump root: {summary['paths']['dump_root']}")
        logger.info(f"Batch size: {summary['processing']['batch_size']}")
        logger.info(f"Tables: {', '.join(table.name for table in tables)}")

        params = config_manager.processing_params
        engine = MigrationEngine(
            config_manager.get_database_connection_string(),
            connection_timeout=config_manager.database_config.connection_timeout,
            fast_executemany=params.fast_executemany,
        )

        with engine.get_connection() as connection:
            importer = SequentialImporter(
                engine,
                connection,
                tables,
                config_manager.get_source_path,
                batch_size=params.batch_size,
                progress_interval_seconds=params.progress_interval_seconds,
                fail_on_missing_required=params.fail_on_missing_required,
            )
            results = importer.run()

        _log_summary(logger, results)
        return 0

    except DumpLoaderError as e:
        logger.error(f"Load failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Load interrupted by user")
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
