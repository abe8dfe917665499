"""
Path utilities for Bunny Upload.

Local paths are converted to posix-style relative paths ("RelPath"): forward
slashes, no leading or trailing slash. Remote keys are built by joining
RelPaths onto a target root. ".." segments are never collapsed - local
paths come from tree traversal, so they can't escape the root anyway.
"""

from pathlib import Path
from typing import Iterator, Union
from urllib.parse import quote

STORAGE_HOST = "storage.bunnycdn.com"


def to_posix(path: Union[str, Path]) -> str:
    """Convert a path to a posix-style string (forward slashes)."""
    if isinstance(path, Path):
        return path.as_posix()
    return path.replace("\\", "/")


def relative_posix(path: Path, base: Path) -> str:
    """Get the relative path as a posix-style string."""
    return path.relative_to(base).as_posix()


def normalize_rel_path(path: Union[str, Path]) -> str:
    """
    Normalize a path to RelPath form.

    Drops empty and "." segments (so "a//b/./c/" -> "a/b/c"), keeps "..".
    """
    parts = [p for p in to_posix(path).split("/") if p and p != "."]
    return "/".join(parts)


def join_key(*parts: Union[str, Path]) -> str:
    """
    Join remote key segments with single slashes.

    Empty segments (including a "/" target root) disappear:
        join_key("/", "a.txt") -> "a.txt"
        join_key("site/", "b/c.txt") -> "site/b/c.txt"
    """
    cleaned = [normalize_rel_path(p) for p in parts]
    return "/".join(p for p in cleaned if p)


def ancestor_dirs(rel_path: str) -> Iterator[str]:
    """
    Yield every proper ancestor directory of a RelPath, nearest first.

        list(ancestor_dirs("a/b/c.txt")) -> ["a/b", "a"]
    """
    parts = rel_path.split("/")
    for i in range(len(parts) - 1, 0, -1):
        yield "/".join(parts[:i])


def listing_path(remote_dir: str) -> str:
    """Path used to list a remote directory: trailing slash, zone root = ""."""
    key = join_key(remote_dir)
    return f"{key}/" if key else ""


def build_url(path: str, storage_zone_name: str, region: str = "") -> str:
    """
    Build a storage API URL for a key.

    Leading slashes are stripped from the key; trailing slashes are kept so
    directory listings stay directory listings. Each segment is
    percent-encoded, so "#", "?", "%" and spaces stay part of the key.
    """
    region_prefix = f"{region}." if region else ""
    trimmed = quote(path.lstrip("/"), safe="/")
    zone = quote(storage_zone_name, safe="")
    return f"https://{region_prefix}{STORAGE_HOST}/{zone}/{trimmed}"
