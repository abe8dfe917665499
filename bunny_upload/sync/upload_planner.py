"""
Upload planning for Bunny Upload.

Every local file is uploaded on every run; there is no content comparison.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List

from ..core.paths import join_key
from .inventory import LocalInventory


@dataclass(frozen=True)
class UploadTask:
    """A file to be uploaded."""
    source_path: Path
    target_key: str
    rel_path: str = ""  # Relative to the upload root


def plan_uploads(inventory: LocalInventory, target_root: str) -> List[UploadTask]:
    """One UploadTask per inventory file, in path order."""
    return [
        UploadTask(
            source_path=inventory.root.joinpath(*rel_path.split("/")),
            target_key=join_key(target_root, rel_path),
            rel_path=rel_path,
        )
        for rel_path in inventory.sorted_files()
    ]
