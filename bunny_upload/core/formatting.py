"""
Formatting for upload summaries.
"""

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_size(size_bytes: float) -> str:
    """Human readable size: whole bytes below 1 KB, one decimal above."""
    if size_bytes < 1024:
        return f"{int(size_bytes)} B"
    for unit in SIZE_UNITS[1:]:
        size_bytes /= 1024
        if size_bytes < 1024:
            return f"{size_bytes:.1f} {unit}"
    return f"{size_bytes / 1024:.1f} PB"


def format_duration(seconds: float) -> str:
    """Human readable duration (1.5s, 2m 5s, 1h 3m)."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    if minutes < 60:
        return f"{minutes}m {secs}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m"


def format_throughput(size_bytes: int, seconds: float) -> str:
    """Average upload rate, e.g. "3.2 MB/s". Empty when nothing was timed."""
    if seconds <= 0 or size_bytes <= 0:
        return ""
    return f"{format_size(size_bytes / seconds)}/s"
