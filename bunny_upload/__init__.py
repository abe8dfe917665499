"""
Bunny Upload - Sync a local directory to Bunny Storage.

Uploads every file under a local directory, optionally cleaning the
destination first. In "avoid-deletes" mode, remote files that are about to
be replaced are never deleted, only overwritten.

Import from submodules directly, or use the shortcuts below:
    from bunny_upload import UploadOptions, synchronize
    from bunny_upload.sync import prune_remote, FileUploader
    from bunny_upload.storage import AsyncStorageClient
"""

from .config import (
    UploadOptions,
    CLEAN_MODES,
    CLEAN_NONE,
    CLEAN_SIMPLE,
    CLEAN_AVOID_DELETES,
    DEFAULT_MAX_CONCURRENT_UPLOADS,
    normalize_clean_mode,
)
from .exceptions import BunnyUploadError, ConfigError, TransportError, NotFound, UploadError
from .sync import (
    SyncResult,
    synchronize,
    synchronize_async,
    upload_directory,
    upload_file,
    delete_file,
)

__version__ = "1.0.0"

__all__ = [
    "UploadOptions",
    "CLEAN_MODES",
    "CLEAN_NONE",
    "CLEAN_SIMPLE",
    "CLEAN_AVOID_DELETES",
    "DEFAULT_MAX_CONCURRENT_UPLOADS",
    "normalize_clean_mode",
    "BunnyUploadError",
    "ConfigError",
    "TransportError",
    "NotFound",
    "UploadError",
    "SyncResult",
    "synchronize",
    "synchronize_async",
    "upload_directory",
    "upload_file",
    "delete_file",
]
