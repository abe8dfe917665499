"""
Local inventory for Bunny Upload.

Scans the upload root once per run and records every file plus every
directory that contains a file (directly or further down). The pruner
deletes anything remote that isn't in here, so a scan that can't see the
whole tree must fail rather than return what it managed to read.
"""

import errno
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, List, Tuple, Union

from ..core.paths import ancestor_dirs, relative_posix


@dataclass(frozen=True)
class LocalInventory:
    """Files and directories under an upload root, as RelPaths."""
    root: Path
    files: FrozenSet[str]
    dirs: FrozenSet[str]

    def sorted_files(self) -> List[str]:
        return sorted(self.files)


def _raise_walk_error(error: OSError):
    raise error


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def _dir_id(path: str) -> Tuple[int, int]:
    st = os.stat(path)  # follows symlinks
    return st.st_dev, st.st_ino


def build_inventory(root: Union[str, Path], include_hidden: bool = False) -> LocalInventory:
    """
    Walk root and build a LocalInventory.

    Symlinks are followed: a linked file or directory is inventoried like
    its target. A directory link that points back at one of its own
    ancestors is skipped, so cycles end. Names starting with "." are
    skipped unless include_hidden is set.

    Raises:
        FileNotFoundError: root doesn't exist
        NotADirectoryError: root is not a directory
        OSError: any directory under root can't be read
    """
    root = Path(root)
    if not root.exists():
        raise FileNotFoundError(errno.ENOENT, "Upload root does not exist", str(root))
    if not root.is_dir():
        raise NotADirectoryError(errno.ENOTDIR, "Upload root is not a directory", str(root))

    top = str(root)
    # dirpath -> identities of that directory and all its ancestors
    ancestry: Dict[str, FrozenSet[Tuple[int, int]]] = {top: frozenset({_dir_id(top)})}

    files = set()
    for dirpath, dirnames, filenames in os.walk(top, onerror=_raise_walk_error, followlinks=True):
        chain = ancestry.pop(dirpath)
        kept = []
        for name in dirnames:
            if not include_hidden and _is_hidden(name):
                continue
            child = os.path.join(dirpath, name)
            child_id = _dir_id(child)
            if child_id in chain:
                continue  # link back to an ancestor
            ancestry[child] = chain | {child_id}
            kept.append(name)
        dirnames[:] = kept

        current = Path(dirpath)
        for name in filenames:
            if not include_hidden and _is_hidden(name):
                continue
            path = current / name
            if path.is_file():
                files.add(relative_posix(path, root))

    dirs = set()
    for rel_path in files:
        for parent in ancestor_dirs(rel_path):
            if parent in dirs:
                break  # its ancestors are already in
            dirs.add(parent)

    return LocalInventory(root=root, files=frozenset(files), dirs=frozenset(dirs))
