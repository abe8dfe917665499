"""
Remote pruning for Bunny Upload ("avoid-deletes" clean mode).

Walks the remote tree under the target root alongside the local inventory
and deletes whatever has no local counterpart. Files that exist locally are
left in place for the upload pass to overwrite, so they never disappear
from the remote while a sync is running.

The walk is sequential and depth-first. Deletes are best-effort: failures
are recorded on the progress tracker and otherwise ignored. Listing
failures (other than 404) propagate and abort the sync.
"""

from typing import Optional

from ..core.paths import join_key
from ..core.progress import SyncProgress
from ..exceptions import NotFound, TransportError
from .inventory import LocalInventory
from .remote import list_remote


async def delete_quietly(client, key: str, is_directory: bool, progress: SyncProgress) -> bool:
    """
    Delete key, discarding the outcome except for the progress record.

    Returns True if the delete succeeded. A 404 means it's already gone.
    """
    try:
        await client.delete(key)
    except NotFound:
        return False
    except TransportError as e:
        progress.delete_failed(key, e)
        return False
    progress.deleted(key, is_directory)
    return True


async def _purge_tree(client, remote_dir: str, progress: SyncProgress):
    for entry in await list_remote(client, remote_dir):
        child = join_key(remote_dir, entry.name)
        if entry.is_directory:
            await _purge_tree(client, child, progress)
        else:
            await delete_quietly(client, child, False, progress)

    if remote_dir:
        await delete_quietly(client, remote_dir, True, progress)


async def delete_recursively(client, remote_dir: str, progress: Optional[SyncProgress] = None) -> SyncProgress:
    """
    Delete everything under remote_dir, then remote_dir itself.

    The zone root ("" or "/") is emptied but never deleted itself.
    """
    progress = progress or SyncProgress(quiet=True)
    await _purge_tree(client, join_key(remote_dir), progress)
    return progress


async def _prune_level(
    client,
    remote_dir: str,
    current_rel: str,
    inventory: LocalInventory,
    progress: SyncProgress,
):
    for entry in await list_remote(client, remote_dir):
        child_rel = join_key(current_rel, entry.name)
        child_key = join_key(remote_dir, entry.name)

        if entry.is_directory:
            if child_rel in inventory.dirs:
                await _prune_level(client, child_key, child_rel, inventory, progress)
            else:
                await _purge_tree(client, child_key, progress)
        elif child_rel not in inventory.files:
            await delete_quietly(client, child_key, False, progress)


async def prune_remote(
    client,
    target_root: str,
    inventory: LocalInventory,
    progress: Optional[SyncProgress] = None,
) -> SyncProgress:
    """
    Delete remote files/directories under target_root that aren't in inventory.

    Remote directories present locally are walked into rather than deleted;
    remote files present locally are left alone.
    """
    progress = progress or SyncProgress(quiet=True)
    await _prune_level(client, join_key(target_root), "", inventory, progress)
    return progress
