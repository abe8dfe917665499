"""
Directory listing normalization.

The list API is not consistent about field names, so each raw record is
mapped onto a RemoteEntry using the alias tables below. The first alias
present in a record wins; anything without a directory signal is a file.
"""

from dataclasses import dataclass
from typing import Any, List, Optional

# Fields that may carry the entry name, in priority order
NAME_FIELDS = ("ObjectName", "Name", "Key")

# (field, value that means "directory"), in priority order
DIRECTORY_SIGNALS = (
    ("IsDirectory", True),
    ("isDirectory", True),
    ("Type", 1),  # 1 = directory in some responses
)


@dataclass(frozen=True)
class RemoteEntry:
    """One item in a remote directory listing."""
    name: str
    is_directory: bool = False


def _entry_name(record: dict) -> str:
    for field in NAME_FIELDS:
        value = record.get(field)
        if isinstance(value, str) and value.strip("/"):
            return value.strip("/")
    return ""


def _is_directory(record: dict) -> bool:
    for field, directory_value in DIRECTORY_SIGNALS:
        value = record.get(field)
        if value is None:
            continue
        # bool is an int subclass; keep True from matching Type == 1 and vice versa
        return type(value) is type(directory_value) and value == directory_value
    return False


def normalize_entry(record: Any) -> Optional[RemoteEntry]:
    """
    Map a raw listing record to a RemoteEntry.

    Returns None for records that aren't dicts or have no usable name -
    an unnamed entry would resolve to its parent directory's own path.
    """
    if not isinstance(record, dict):
        return None
    name = _entry_name(record)
    if not name:
        return None
    return RemoteEntry(name=name, is_directory=_is_directory(record))


def parse_listing(data: Any) -> List[RemoteEntry]:
    """Normalize a whole listing response. Anything but a JSON array is empty."""
    if not isinstance(data, list):
        return []
    entries = []
    for record in data:
        entry = normalize_entry(record)
        if entry is not None:
            entries.append(entry)
    return entries
