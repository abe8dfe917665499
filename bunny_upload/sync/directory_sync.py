"""
Directory sync for Bunny Upload.

synchronize() is the main entry point:

1. Scan the local tree (LocalInventory)
2. Clean the destination according to the clean mode:
   - "none": leave the remote alone
   - "simple": one best-effort delete of the whole target root
   - "avoid-deletes": prune remote entries missing locally, keep replacements
3. Upload every local file with bounded concurrency

Step 2 always finishes before the first upload starts, so no delete can
race an upload of the same key.
"""

import asyncio
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from ..config import CLEAN_AVOID_DELETES, CLEAN_SIMPLE, UploadOptions
from ..core.paths import join_key
from ..core.progress import SyncProgress
from ..storage.client import StorageClient
from ..storage.session import AsyncStorageClient
from .inventory import LocalInventory, build_inventory
from .pruner import delete_quietly, prune_remote
from .upload_planner import plan_uploads
from .uploader import FileUploader


@dataclass
class SyncResult:
    """Summary of a synchronize() run."""
    files_uploaded: int = 0
    bytes_uploaded: int = 0
    files_deleted: int = 0
    dirs_deleted: int = 0
    delete_failures: List[str] = field(default_factory=list)
    elapsed: float = 0.0


async def _synchronize_with(
    client,
    inventory: LocalInventory,
    target_root: str,
    options: UploadOptions,
    progress: SyncProgress,
    start_time: float,
) -> SyncResult:
    tasks = plan_uploads(inventory, target_root)
    progress.total_files = len(tasks)

    mode = options.clean_mode
    if mode == CLEAN_SIMPLE:
        await delete_quietly(client, join_key(target_root), True, progress)
    elif mode == CLEAN_AVOID_DELETES:
        await prune_remote(client, target_root, inventory, progress)

    uploader = FileUploader(client, max_workers=options.max_concurrent_uploads)
    results = await uploader.upload_many_async(tasks, progress)

    return SyncResult(
        files_uploaded=len(results),
        bytes_uploaded=sum(r.bytes_uploaded for r in results),
        files_deleted=progress.files_deleted,
        dirs_deleted=progress.dirs_deleted,
        delete_failures=list(progress.delete_failures),
        elapsed=time.time() - start_time,
    )


async def synchronize_async(
    source_root: Union[str, Path],
    target_root: str,
    options: UploadOptions,
    client=None,
    progress: Optional[SyncProgress] = None,
) -> SyncResult:
    """
    Upload source_root to target_root, cleaning the destination first.

    Args:
        source_root: Local directory to upload from
        target_root: Remote directory to upload into ("" or "/" = zone root)
        options: Zone, credentials, clean mode, concurrency
        client: Storage client to use; an AsyncStorageClient is opened if None
        progress: Progress tracker; a quiet one is used if None

    Raises:
        ConfigError: options are invalid
        OSError: the local tree can't be read
        TransportError: a remote listing failed during pruning
        UploadError: one or more uploads failed (completed ones stay uploaded)
    """
    options.validate()
    start_time = time.time()
    progress = progress or SyncProgress(quiet=True)

    try:
        inventory = build_inventory(Path(source_root), include_hidden=options.include_hidden)
        if client is not None:
            return await _synchronize_with(client, inventory, target_root, options, progress, start_time)

        async with AsyncStorageClient(options) as session_client:
            return await _synchronize_with(session_client, inventory, target_root, options, progress, start_time)
    finally:
        progress.close()


def synchronize(
    source_root: Union[str, Path],
    target_root: str,
    options: UploadOptions,
    progress: Optional[SyncProgress] = None,
) -> SyncResult:
    """Blocking wrapper around synchronize_async()."""
    return asyncio.run(synchronize_async(source_root, target_root, options, progress=progress))


# Alias
upload_directory = synchronize


def upload_file(source_path: Union[str, Path], target_path: str, options: UploadOptions) -> int:
    """
    Upload a single file.

    Returns number of bytes sent. Raises TransportError / OSError on failure.
    """
    options.validate()
    return StorageClient(options).put_file(source_path, target_path)


def delete_file(target_path: str, options: UploadOptions):
    """
    Delete a single file or empty directory.

    Unlike the deletes made while pruning, failures are raised (NotFound
    for a missing key).
    """
    options.validate()
    StorageClient(options).delete(target_path)
