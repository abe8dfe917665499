"""
Remote directory listing for the sync engine.
"""

from typing import List

from ..exceptions import NotFound
from ..storage.listing import RemoteEntry


async def list_remote(client, remote_dir: str) -> List[RemoteEntry]:
    """
    List one level of remote_dir.

    A directory that doesn't exist lists as empty, so walks over branches
    that were never uploaded just stop. Any other TransportError propagates.
    """
    try:
        return await client.list_directory(remote_dir)
    except NotFound:
        return []
