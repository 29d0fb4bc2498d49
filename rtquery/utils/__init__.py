"""
Utilities package for rtquery.

Exports shared helpers for logging and profiling. Keep this package free of
domain-specific logic.
"""

from rtquery.utils.logging import configure_logging, get_logger
from rtquery.utils.profiler import ProfileStats, profile_block

__all__ = [
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
]
