"""Pytest configuration and fixtures."""

import asyncio
import tempfile
from pathlib import Path

import pytest

from bunny_upload.config import UploadOptions
from bunny_upload.core.paths import join_key
from bunny_upload.exceptions import NotFound, TransportError
from bunny_upload.storage.listing import parse_listing


class FakeStorage:
    """
    In-memory stand-in for AsyncStorageClient.

    Files live in a dict keyed by remote path. Directories are tracked
    explicitly, like real storage folders: uploading a file creates its
    parents, and they stay until deleted. Deleting a non-empty directory is
    refused, so recursive deletes must go bottom-up. Every call is appended
    to `calls` as (operation, key).
    """

    def __init__(self, files=None, empty_dirs=(), put_delay=0.0):
        self.objects = {}
        self.dirs = set()
        for key, content in (files or {}).items():
            self._store(join_key(key), content.encode() if isinstance(content, str) else content)
        for d in empty_dirs:
            self._add_dir(join_key(d))
        self.put_delay = put_delay
        self.calls = []
        self.fail_puts = set()
        self.fail_deletes = set()
        self.fail_lists = set()
        self.directory_flag = "IsDirectory"
        self.in_flight = 0
        self.max_in_flight = 0

    def _add_dir(self, key: str):
        while key:
            self.dirs.add(key)
            key = key.rpartition("/")[0]

    def _store(self, key: str, data: bytes):
        self.objects[key] = data
        self._add_dir(key.rpartition("/")[0])

    def _is_dir(self, key: str) -> bool:
        return key == "" or key in self.dirs

    def _children(self, key: str) -> dict:
        """Immediate children of a directory: name -> is_directory."""
        prefix = f"{key}/" if key else ""
        children = {}
        for path, is_dir in [(p, False) for p in self.objects] + [(d, True) for d in self.dirs]:
            if path.startswith(prefix) and "/" not in path[len(prefix):]:
                children[path[len(prefix):]] = is_dir
        return children

    async def list_directory(self, remote_dir: str):
        key = join_key(remote_dir)
        self.calls.append(("list", key))
        await asyncio.sleep(0)
        if key in self.fail_lists:
            raise TransportError(f"GET {key}/: HTTP 500", status=500)
        if not self._is_dir(key):
            raise NotFound(f"GET {key}/: not found")
        records = []
        for name, is_dir in sorted(self._children(key).items()):
            record = {"ObjectName": name}
            if is_dir:
                record[self.directory_flag] = 1 if self.directory_flag == "Type" else True
            records.append(record)
        return parse_listing(records)

    async def put_file(self, source_path, key: str) -> int:
        key = join_key(key)
        self.calls.append(("put", key))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if key in self.fail_puts:
                await asyncio.sleep(0)  # fail ahead of slower uploads
                raise TransportError(f"PUT {key}: HTTP 500", status=500)
            await asyncio.sleep(self.put_delay)
            data = Path(source_path).read_bytes()
            self._store(key, data)
            return len(data)
        finally:
            self.in_flight -= 1

    async def delete(self, key: str):
        key = join_key(key)
        self.calls.append(("delete", key))
        await asyncio.sleep(0)
        if key in self.fail_deletes:
            raise TransportError(f"DELETE {key}: HTTP 500", status=500)
        if key in self.objects:
            del self.objects[key]
            return
        if key and key in self.dirs:
            if self._children(key):
                raise TransportError(f"DELETE {key}: HTTP 400 directory not empty", status=400)
            self.dirs.discard(key)
            return
        raise NotFound(f"DELETE {key}: not found")

    def keys(self) -> set:
        return set(self.objects)

    def ops(self, operation: str) -> list:
        return [key for op, key in self.calls if op == operation]


def make_tree(root: Path, files: dict) -> Path:
    """Create files (relative posix path -> text content) under root."""
    for rel_path, content in files.items():
        path = root.joinpath(*rel_path.split("/"))
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "stress: stress tests with large task counts"
    )


@pytest.fixture
def temp_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def options():
    return UploadOptions(storage_zone_name="test-zone", access_key="secret")


@pytest.fixture
def fake_storage():
    """Factory for FakeStorage instances."""
    return FakeStorage


@pytest.fixture
def tree():
    """make_tree helper."""
    return make_tree
