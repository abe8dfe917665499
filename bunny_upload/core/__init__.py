"""
Core utilities for Bunny Upload: path helpers, formatting, progress.
"""

from .paths import (
    to_posix,
    relative_posix,
    normalize_rel_path,
    join_key,
    ancestor_dirs,
    listing_path,
    build_url,
)
from .formatting import format_size, format_duration, format_throughput
from .progress import ProgressTracker, SyncProgress

__all__ = [
    "to_posix",
    "relative_posix",
    "normalize_rel_path",
    "join_key",
    "ancestor_dirs",
    "listing_path",
    "build_url",
    "format_size",
    "format_duration",
    "format_throughput",
    "ProgressTracker",
    "SyncProgress",
]
