"""
Sync engine module.

Handles the local inventory, remote pruning, and concurrent uploads.
"""

from .inventory import LocalInventory, build_inventory
from .upload_planner import UploadTask, plan_uploads
from .remote import list_remote
from .pruner import delete_quietly, delete_recursively, prune_remote
from .uploader import FileUploader, UploadResult
from .directory_sync import (
    SyncResult,
    synchronize,
    synchronize_async,
    upload_directory,
    upload_file,
    delete_file,
)

__all__ = [
    # Inventory
    "LocalInventory",
    "build_inventory",
    # Upload planning
    "UploadTask",
    "plan_uploads",
    # Remote
    "list_remote",
    # Pruner
    "delete_quietly",
    "delete_recursively",
    "prune_remote",
    # Uploader
    "FileUploader",
    "UploadResult",
    # Directory sync
    "SyncResult",
    "synchronize",
    "synchronize_async",
    "upload_directory",
    "upload_file",
    "delete_file",
]
