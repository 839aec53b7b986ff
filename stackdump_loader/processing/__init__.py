"""
Processing module for the dump loader.

Provides the streaming table loader and the sequential per-table run driver.
"""

from .sequential_importer import SequentialImporter, select_tables
from .table_loader import LoadState, TableLoader, build_binders, build_nullable_positions

__all__ = [
    'SequentialImporter',
    'select_tables',
    'LoadState',
    'TableLoader',
    'build_binders',
    'build_nullable_positions',
]
