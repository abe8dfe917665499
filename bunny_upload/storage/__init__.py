"""
Bunny Storage API access.

Handles listing normalization and the synchronous (requests) and
asynchronous (aiohttp) storage clients.
"""

from .listing import RemoteEntry, normalize_entry, parse_listing
from .client import StorageClient
from .session import AsyncStorageClient

__all__ = [
    "RemoteEntry",
    "normalize_entry",
    "parse_listing",
    "StorageClient",
    "AsyncStorageClient",
]
