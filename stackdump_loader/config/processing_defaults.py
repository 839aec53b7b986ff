"""
Centralized configuration defaults for dump loading operations.

This module defines operational configuration constants used throughout the loader.
Environment variables and CLI arguments can override these defaults at runtime.
"""


class ProcessingDefaults:
    """
    Centralized operational configuration for dump loading.

    All values are defaults that can be overridden via environment or CLI arguments:
    - stackdump_loader --batch-size 4096
    - stackdump_loader --log-level DEBUG
    """

    # Batch processing
    BATCH_SIZE = 1024  # Rows per execute + commit
    FAST_EXECUTEMANY = True  # pyodbc array binding for executemany

    # Progress reporting
    PROGRESS_INTERVAL_SECONDS = 1.0  # Minimum time between progress lines

    # Row checks
    FAIL_ON_MISSING_REQUIRED = True  # Reject rows that omit a non-nullable column

    # Database connection (PostgreSQL via psqlODBC)
    DB_DRIVER = "PostgreSQL Unicode"
    DB_SERVER = "localhost"
    DB_PORT = 5432
    DB_DATABASE = "so"
    DB_USERNAME = "so"
    DB_PASSWORD = "so"  # Left out of log_summary
    CONNECTION_TIMEOUT = 30  # Login timeout in seconds

    # Logging
    LOG_LEVEL = "INFO"  # Default logging level (CRITICAL, ERROR, WARNING, INFO, DEBUG)
    LOG_DIR = "logs"

    @classmethod
    def to_dict(cls) -> dict:
        """
        Export all defaults as a dictionary.

        Returns:
            Dictionary of all ProcessingDefaults class attributes.
        """
        return {
            key: getattr(cls, key)
            for key in dir(cls)
            if not key.startswith('_') and key.isupper()
        }

    @classmethod
    def log_summary(cls, logger=None):
        """
        Log a summary of all operational defaults.

        Args:
            logger: Optional logger instance. If None, prints to stdout.
        """
        summary = "\n".join(f"  {key}: {value}" for key, value in sorted(cls.to_dict().items())
                            if key != "DB_PASSWORD")
        message = f"Processing Configuration Defaults:\n{summary}"

        if logger:
            logger.info(message)
        else:
            print(message)
