"""
Progress tracking for sync operations.
"""

import threading
from typing import List


class ProgressTracker:
    """Base class for thread-safe progress tracking."""

    def __init__(self, quiet: bool = False):
        self.lock = threading.Lock()
        self.quiet = quiet
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, msg: str):
        """Write a message (thread-safe). Suppressed when quiet or closed."""
        if self.quiet:
            return
        with self.lock:
            if not self._closed:
                print(msg)

    def close(self):
        """Close the tracker; later writes are dropped, counters stay readable."""
        with self.lock:
            self._closed = True


class SyncProgress(ProgressTracker):
    """
    Counts what a sync did.

    Deletes that fail are swallowed by the pruner, but they are always
    recorded here (even when quiet) so callers can inspect them.
    """

    def __init__(self, total_files: int = 0, quiet: bool = False):
        super().__init__(quiet=quiet)
        self.total_files = total_files
        self.uploaded = 0
        self.bytes_uploaded = 0
        self.failed = 0
        self.skipped = 0
        self.files_deleted = 0
        self.dirs_deleted = 0
        self.delete_failures: List[str] = []

    def file_uploaded(self, key: str, size: int):
        with self.lock:
            self.uploaded += 1
            self.bytes_uploaded += size
            done = self.uploaded + self.failed
        self.write(f"  [{done}/{self.total_files}] {key}")

    def upload_failed(self, message: str):
        with self.lock:
            self.failed += 1
        self.write(f"  {message}")

    def upload_skipped(self):
        with self.lock:
            self.skipped += 1

    def deleted(self, key: str, is_directory: bool):
        with self.lock:
            if is_directory:
                self.dirs_deleted += 1
            else:
                self.files_deleted += 1
        self.write(f"  DEL: {key}{'/' if is_directory else ''}")

    def delete_failed(self, key: str, error: Exception):
        with self.lock:
            self.delete_failures.append(key)
        self.write(f"  WARN (delete ignored): {key} - {error}")
