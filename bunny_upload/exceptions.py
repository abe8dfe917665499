"""
Exceptions for Bunny Upload.
"""

from typing import Optional


class BunnyUploadError(Exception):
    """Base class for all errors raised by this package."""


class ConfigError(BunnyUploadError):
    """Invalid or missing configuration (zone, key, clean mode, concurrency)."""


class TransportError(BunnyUploadError):
    """
    A storage API request failed.

    status is the HTTP status code, or None when no response was received
    (timeout, connection reset, DNS failure).
    """

    def __init__(self, message: str, status: Optional[int] = None, method: str = "", url: str = ""):
        super().__init__(message)
        self.status = status
        self.method = method
        self.url = url


class NotFound(TransportError):
    """The storage API answered 404 for the requested key."""

    def __init__(self, message: str, method: str = "", url: str = ""):
        super().__init__(message, status=404, method=method, url=url)


class UploadError(BunnyUploadError):
    """One or more uploads in a directory upload failed."""

    def __init__(self, failures: list, total: int = 0):
        self.failures = list(failures)
        self.total = total
        first = self.failures[0].message if self.failures else "unknown error"
        super().__init__(
            f"{len(self.failures)} of {total or len(self.failures)} uploads failed (first: {first})"
        )
