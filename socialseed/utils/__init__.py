"""
Utilities package for social-seed.

Exports shared helpers for logging, profiling, and duration parsing.
Keep this package lightweight and free of domain-specific logic.
"""

from socialseed.utils.durations import parse_duration
from socialseed.utils.logging import configure_logging, get_logger
from socialseed.utils.profiler import ProfileStats, profile_block

__all__ = [
    "configure_logging",
    "get_logger",
    "parse_duration",
    "ProfileStats",
    "profile_block",
]
