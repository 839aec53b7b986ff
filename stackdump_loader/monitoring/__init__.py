"""
Monitoring module for the dump loader.

This module provides throughput reporting for table loads.
"""

from .progress_monitor import ProgressMonitor

__all__ = [
    'ProgressMonitor'
]
