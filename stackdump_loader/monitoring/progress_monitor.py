"""
Rate-limited throughput reporting for table loads.

The monitor is purely observational: it counts rows as the loader binds them and
logs a progress line at most once per interval, plus one final line per table.
"""

import logging
import time
import psutil

from typing import Callable, Optional


class ProgressMonitor:
    """
    Row counter with self-throttled progress reporting.

    Each report states the total rows so far and the rows since the previous report,
    which over the one second default interval is the instantaneous rate. Process
    memory is sampled at every report to track the peak of the load.
    """

    def __init__(self, interval_seconds: float = 1.0, clock: Callable[[], float] = time.monotonic,
                 logger: Optional[logging.Logger] = None, table_name: str = None):
        """
        Initialize the progress monitor.

        Args:
            interval_seconds: Minimum time between two progress reports
            clock: Monotonic time source in seconds
            logger: Optional logger instance
            table_name: Table being loaded, included in report lines
        """
        self.interval_seconds = interval_seconds
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)
        self.table_name = table_name

        self.count = 0
        self.last_count = 0
        self.start_time = clock()
        self.last_update = self.start_time
        self.reports = 0
        self.peak_memory_mb = 0.0

    def increment(self) -> int:
        """
        Count one row, reporting if the interval has elapsed since the last report.

        Returns:
            Total rows counted so far
        """
        self.count += 1
        now = self.clock()
        if now - self.last_update >= self.interval_seconds:
            self.report()
            self.last_count = self.count
            self.last_update = now
        return self.count

    def report(self) -> None:
        """Log the current totals."""
        self.reports += 1
        memory_mb = self._sample_memory_mb()
        prefix = f"[{self.table_name}] " if self.table_name else ""
        self.logger.info(
            f"{prefix}Saved {self.count:,} rows ({self.count - self.last_count:,} rows/s), "
            f"memory {memory_mb:.1f} MB"
        )

    @property
    def elapsed_seconds(self) -> float:
        return self.clock() - self.start_time

    def _sample_memory_mb(self) -> float:
        try:
            memory_mb = psutil.Process().memory_info().rss / 1024 / 1024
        except psutil.Error:
            return self.peak_memory_mb
        if memory_mb > self.peak_memory_mb:
            self.peak_memory_mb = memory_mb
        return memory_mb
