"""
Centralized configuration management for the Stack Exchange dump loader.

This module provides the ConfigManager class that holds everything a run needs to
know up front: the database endpoint, processing parameters, where the dump files
live and which table catalogue to load.
"""

import os
import logging

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from ..exceptions import ConfigurationError
from ..models import Table
from ..schema import load_schema_file, stack_exchange_tables
from .processing_defaults import ProcessingDefaults


ENV_PREFIX = "STACKDUMP_LOADER_"
_TRUE_VALUES = ('1', 'true', 'yes', 'on')
_FALSE_VALUES = ('0', 'false', 'no', 'off')


def _env(name: str, default: Any = None) -> Any:
    return os.environ.get(ENV_PREFIX + name, default)


def _env_int(name: str, default: int) -> int:
    value = _env(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{ENV_PREFIX}{name} must be an integer, got {value!r}")


def _env_float(name: str, default: float) -> float:
    value = _env(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{ENV_PREFIX}{name} must be a number, got {value!r}")


def _env_bool(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{ENV_PREFIX}{name} must be a boolean, got {value!r}")


@dataclass
class DatabaseConfig:
    """Database configuration with environment variable support."""
    connection_string: Optional[str] = None
    driver: str = ProcessingDefaults.DB_DRIVER
    server: str = ProcessingDefaults.DB_SERVER
    port: int = ProcessingDefaults.DB_PORT
    database: str = ProcessingDefaults.DB_DATABASE
    username: str = ProcessingDefaults.DB_USERNAME
    password: str = field(default=ProcessingDefaults.DB_PASSWORD, repr=False)
    connection_timeout: int = ProcessingDefaults.CONNECTION_TIMEOUT

    @classmethod
    def from_environment(cls) -> 'DatabaseConfig':
        """Create database configuration from environment variables."""
        return cls(
            # Full connection string overrides the individual components
            connection_string=_env('CONNECTION_STRING') or None,
            driver=_env('DB_DRIVER', cls.driver),
            server=_env('DB_SERVER', cls.server),
            port=_env_int('DB_PORT', cls.port),
            database=_env('DB_DATABASE', cls.database),
            username=_env('DB_USERNAME', cls.username),
            password=_env('DB_PASSWORD', ProcessingDefaults.DB_PASSWORD),
            connection_timeout=_env_int('DB_CONNECTION_TIMEOUT', cls.connection_timeout),
        )

    def get_connection_string(self) -> str:
        """ODBC connection string, built from the components unless given explicitly."""
        if self.connection_string:
            return self.connection_string

        return (
            f"DRIVER={{{self.driver}}};"
            f"SERVER={self.server};"
            f"PORT={self.port};"
            f"DATABASE={self.database};"
            f"UID={self.username};"
            f"PWD={self.password};"
        )


@dataclass
class ProcessingParameters:
    """Processing parameters with environment variable support."""
    batch_size: int = ProcessingDefaults.BATCH_SIZE
    progress_interval_seconds: float = ProcessingDefaults.PROGRESS_INTERVAL_SECONDS
    fail_on_missing_required: bool = ProcessingDefaults.FAIL_ON_MISSING_REQUIRED
    fast_executemany: bool = ProcessingDefaults.FAST_EXECUTEMANY

    @classmethod
    def from_environment(cls) -> 'ProcessingParameters':
        """Create processing parameters from environment variables."""
        return cls(
            batch_size=_env_int('BATCH_SIZE', cls.batch_size),
            progress_interval_seconds=_env_float('PROGRESS_INTERVAL', cls.progress_interval_seconds),
            fail_on_missing_required=_env_bool('FAIL_ON_MISSING_REQUIRED', cls.fail_on_missing_required),
            fast_executemany=_env_bool('FAST_EXECUTEMANY', cls.fast_executemany),
        )


@dataclass
class ConfigPaths:
    """Input file paths with environment variable support."""
    dump_root: Path = field(default_factory=Path.cwd)
    schema_path: Optional[Path] = None

    @classmethod
    def from_environment(cls, dump_root: Optional[Union[str, Path]] = None) -> 'ConfigPaths':
        """Create input paths from environment variables."""
        if dump_root is None:
            dump_root = _env('DUMP_ROOT') or Path.cwd()

        schema_path = _env('SCHEMA_PATH')
        return cls(
            dump_root=Path(dump_root),
            schema_path=Path(schema_path) if schema_path else None,
        )


class ConfigManager:
    """
    Configuration holder for one loader run.

    Consolidates:
    - Database connection configuration
    - Processing parameters
    - Dump file locations
    - Table catalogue loading (built-in or from a schema file)
    """

    def __init__(self, dump_root: Optional[Union[str, Path]] = None):
        """
        Initialize the configuration manager from environment variables.

        Args:
            dump_root: Directory holding the dump files. If None, uses the environment or cwd.
        """
        self.logger = logging.getLogger(__name__)

        self.paths = ConfigPaths.from_environment(dump_root)
        self.database_config = DatabaseConfig.from_environment()
        self.processing_params = ProcessingParameters.from_environment()

        self._tables_cache: Dict[str, Tuple[Table, ...]] = {}

        self.logger.debug(f"ConfigManager initialized with dump root: {self.paths.dump_root}")

    def apply_overrides(self, **overrides: Any) -> None:
        """
        Override individual settings, typically from CLI arguments.

        Keyword names are fields of DatabaseConfig, ProcessingParameters or ConfigPaths.
        None values are ignored.

        Raises:
            ConfigurationError: If a name is not a known setting
        """
        database, processing, paths = {}, {}, {}
        database_fields = {f.name for f in fields(DatabaseConfig)}
        processing_fields = {f.name for f in fields(ProcessingParameters)}
        path_fields = {f.name for f in fields(ConfigPaths)}

        for key, value in overrides.items():
            if value is None:
                continue
            if key in database_fields:
                database[key] = value
            elif key in processing_fields:
                processing[key] = value
            elif key in path_fields:
                paths[key] = Path(value)
            else:
                raise ConfigurationError(f"Unknown configuration setting: {key}")

        if database:
            self.database_config = replace(self.database_config, **database)
        if processing:
            self.processing_params = replace(self.processing_params, **processing)
        if paths:
            self.paths = replace(self.paths, **paths)
            self.clear_cache()

    def get_database_connection_string(self) -> str:
        return self.database_config.get_connection_string()

    def load_tables(self, schema_path: Optional[Union[str, Path]] = None) -> Tuple[Table, ...]:
        """
        Load the table catalogue with caching.

        Args:
            schema_path: Optional JSON/YAML schema file. If None, uses the configured
                schema path, or the built-in Stack Exchange catalogue when none is set.

        Returns:
            Ordered tuple of Table descriptors

        Raises:
            SchemaConfigError: If the schema file is missing or malformed
        """
        if schema_path is None:
            schema_path = self.paths.schema_path

        cache_key = str(schema_path) if schema_path else "<built-in>"
        if cache_key in self._tables_cache:
            self.logger.debug(f"Returning cached table catalogue for {cache_key}")
            return self._tables_cache[cache_key]

        if schema_path:
            tables = load_schema_file(schema_path)
        else:
            tables = stack_exchange_tables()

        self._tables_cache[cache_key] = tables
        self.logger.info(f"Loaded {len(tables)} table definitions from {cache_key}")
        return tables

    def get_source_path(self, table: Table) -> Path:
        """Path of the dump file for a table under the dump root."""
        return self.paths.dump_root / table.source_file_name

    def validate_configuration(self, tables: Optional[Tuple[Table, ...]] = None) -> bool:
        """
        Validate all configuration settings.

        Args:
            tables: Tables whose dump files must exist. If None, dump files are not checked.

        Returns:
            True if all configurations are valid

        Raises:
            ConfigurationError: If any configuration is invalid
        """
        errors = []

        if not self.get_database_connection_string():
            errors.append("Database connection string is empty")

        if not self.paths.dump_root.is_dir():
            errors.append(f"Dump root directory does not exist: {self.paths.dump_root}")
        else:
            for table in tables or ():
                source_path = self.get_source_path(table)
                if not source_path.is_file():
                    errors.append(f"Dump file for '{table.name}' does not exist: {source_path}")

        if self.paths.schema_path is not None and not self.paths.schema_path.is_file():
            errors.append(f"Schema file does not exist: {self.paths.schema_path}")

        if self.processing_params.batch_size <= 0:
            errors.append("Batch size must be greater than 0")

        if self.processing_params.progress_interval_seconds < 0:
            errors.append("Progress interval cannot be negative")

        if self.database_config.connection_timeout < 0:
            errors.append("Connection timeout cannot be negative")

        if errors:
            raise ConfigurationError(f"Configuration validation failed: {'; '.join(errors)}")

        self.logger.info("Configuration validation passed")
        return True

    def get_configuration_summary(self) -> Dict[str, Any]:
        """
        Get a summary of all configuration settings. Credentials are left out.

        Returns:
            Dictionary containing configuration summary
        """
        return {
            'database': {
                'explicit_connection_string': bool(self.database_config.connection_string),
                'driver': self.database_config.driver,
                'server': self.database_config.server,
                'port': self.database_config.port,
                'database': self.database_config.database,
                'username': self.database_config.username,
                'connection_timeout': self.database_config.connection_timeout,
            },
            'processing': {
                'batch_size': self.processing_params.batch_size,
                'progress_interval_seconds': self.processing_params.progress_interval_seconds,
                'fail_on_missing_required': self.processing_params.fail_on_missing_required,
                'fast_executemany': self.processing_params.fast_executemany,
            },
            'paths': {
                'dump_root': str(self.paths.dump_root),
                'schema_path': str(self.paths.schema_path) if self.paths.schema_path else None,
            }
        }

    def clear_cache(self) -> None:
        """Clear cached table catalogues."""
        self._tables_cache.clear()
        self.logger.debug("Configuration cache cleared")
