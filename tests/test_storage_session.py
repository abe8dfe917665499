"""
Tests for AsyncStorageClient against a local aiohttp test server.

The server keeps files in a dict and imitates the storage API: GET on a
path ending in "/" lists it, PUT stores, DELETE removes (directories
recursively).
"""

import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from bunny_upload.config import UploadOptions
from bunny_upload.core.paths import STORAGE_HOST
from bunny_upload.exceptions import NotFound, TransportError
from bunny_upload.storage.listing import RemoteEntry
from bunny_upload.storage.session import AsyncStorageClient
from bunny_upload.sync.directory_sync import synchronize_async

ZONE = "test-zone"


class FakeBunny:
    """Request handler state for the test server."""

    def __init__(self, files=None):
        self.files = dict(files or {})
        self.requests = []
        self.flaky = {}  # path -> number of 503s left
        self.broken = set()  # paths that always answer 500

    def _children(self, directory: str):
        prefix = directory
        entries = {}
        for path in self.files:
            if path.startswith(prefix):
                head, sep, _ = path[len(prefix):].partition("/")
                entries[head] = entries.get(head, False) or bool(sep)
        return entries

    async def handle(self, request: web.Request) -> web.Response:
        path = request.match_info["path"]
        self.requests.append((request.method, path, dict(request.headers)))

        if request.headers.get("AccessKey") != "secret":
            return web.Response(status=401, text="Unauthorized")
        if path in self.broken:
            return web.Response(status=500, text="boom")
        if self.flaky.get(path):
            self.flaky[path] -= 1
            return web.Response(status=503)

        if request.method == "GET" and (path == "" or path.endswith("/")):
            children = self._children(path)
            if path and not children:
                return web.Response(status=404)
            if path == "html/":
                return web.Response(text="<html></html>", content_type="text/html")
            return web.json_response(
                [{"ObjectName": name, "IsDirectory": is_dir} for name, is_dir in sorted(children.items())]
            )
        if request.method == "PUT":
            self.files[path] = await request.read()
            return web.Response(status=201)
        if request.method == "DELETE":
            if path in self.files:
                del self.files[path]
                return web.Response(status=200)
            nested = [p for p in self.files if p.startswith(path + "/")]
            if not nested:
                return web.Response(status=404)
            for p in nested:
                del self.files[p]
            return web.Response(status=200)
        return web.Response(status=405)


class LocalStorageClient(AsyncStorageClient):
    """AsyncStorageClient pointed at the test server instead of the CDN."""

    def __init__(self, options, server: test_utils.TestServer):
        super().__init__(options, retry_delay=0)
        self.server = server

    def url_for(self, path: str) -> str:
        root = str(self.server.make_url("")).rstrip("/")
        return super().url_for(path).replace(f"https://{STORAGE_HOST}", root, 1)


def run_against(bunny: FakeBunny, test, options=None):
    """Start a server for bunny, run test(client), shut everything down."""
    options = options or UploadOptions(storage_zone_name=ZONE, access_key="secret")

    async def main():
        app = web.Application()
        app.router.add_route("*", "/" + ZONE + "/{path:.*}", bunny.handle)
        server = test_utils.TestServer(app)
        await server.start_server()
        try:
            async with LocalStorageClient(options, server) as client:
                return await test(client)
        finally:
            await server.close()

    return asyncio.run(main())


class TestAsyncOperations:

    def test_list_directory(self):
        bunny = FakeBunny({"site/a.txt": b"a", "site/sub/b.txt": b"b"})
        entries = run_against(bunny, lambda c: c.list_directory("site"))
        assert entries == [RemoteEntry("a.txt", False), RemoteEntry("sub", True)]
        assert bunny.requests[0][:2] == ("GET", "site/")

    def test_list_missing_raises_not_found(self):
        with pytest.raises(NotFound):
            run_against(FakeBunny(), lambda c: c.list_directory("missing"))

    def test_list_non_json_is_empty(self):
        bunny = FakeBunny({"html/index.html": b"x"})
        assert run_against(bunny, lambda c: c.list_directory("html")) == []

    def test_put_file(self, temp_dir):
        source = temp_dir / "a.txt"
        source.write_bytes(b"hello world")
        bunny = FakeBunny()
        size = run_against(bunny, lambda c: c.put_file(source, "/site/a.txt"))
        assert size == 11
        assert bunny.files == {"site/a.txt": b"hello world"}
        headers = bunny.requests[0][2]
        assert headers["Content-Type"] == "application/octet-stream"
        assert headers["AccessKey"] == "secret"

    def test_delete_missing_raises_not_found(self):
        with pytest.raises(NotFound):
            run_against(FakeBunny(), lambda c: c.delete("nope.txt"))

    def test_retries_server_errors(self, temp_dir):
        source = temp_dir / "a.txt"
        source.write_bytes(b"abc")
        bunny = FakeBunny()
        bunny.flaky["a.txt"] = 2
        run_against(bunny, lambda c: c.put_file(source, "a.txt"))
        assert bunny.files == {"a.txt": b"abc"}
        assert [m for m, _, _ in bunny.requests] == ["PUT", "PUT", "PUT"]

    def test_gives_up_after_max_retries(self):
        bunny = FakeBunny({"x.txt": b"x"})
        bunny.broken.add("x.txt")
        with pytest.raises(TransportError) as exc_info:
            run_against(bunny, lambda c: c.delete("x.txt"))
        assert exc_info.value.status == 500
        assert len(bunny.requests) == 3

    def test_bad_credentials_not_retried(self):
        bunny = FakeBunny({"x.txt": b"x"})
        options = UploadOptions(storage_zone_name=ZONE, access_key="wrong")
        with pytest.raises(TransportError) as exc_info:
            run_against(bunny, lambda c: c.delete("x.txt"), options=options)
        assert exc_info.value.status == 401
        assert len(bunny.requests) == 1

    def test_requires_context_manager(self):
        client = AsyncStorageClient(UploadOptions(storage_zone_name=ZONE, access_key="secret"))
        with pytest.raises(RuntimeError):
            asyncio.run(client.delete("a.txt"))


class TestSynchronizeOverHttp:

    def test_avoid_deletes_end_to_end(self, temp_dir, tree):
        tree(temp_dir, {"a.txt": "new a", "b/c.txt": "c"})
        bunny = FakeBunny({"site/a.txt": b"old a", "site/old.txt": b"old", "site/stale/x.txt": b"x"})
        options = UploadOptions(
            storage_zone_name=ZONE, access_key="secret", clean_destination="avoid-deletes"
        )
        result = run_against(bunny, lambda c: synchronize_async(temp_dir, "site", options, client=c))

        assert bunny.files == {"site/a.txt": b"new a", "site/b/c.txt": b"c"}
        assert result.files_uploaded == 2
        deleted = [path for method, path, _ in bunny.requests if method == "DELETE"]
        assert "site/a.txt" not in deleted
        assert set(deleted) == {"site/old.txt", "site/stale/x.txt", "site/stale"}

    def test_reserved_characters_in_names(self, temp_dir, tree):
        names = ["notes#1.txt", "q?x.txt", "100%.txt", "a b.txt"]
        tree(temp_dir, {name: name for name in names})
        bunny = FakeBunny({"site/notes#1.txt": b"old"})
        options = UploadOptions(
            storage_zone_name=ZONE, access_key="secret", clean_destination="avoid-deletes"
        )

        async def twice(client):
            await synchronize_async(temp_dir, "site", options, client=client)
            return await synchronize_async(temp_dir, "site", options, client=client)

        run_against(bunny, twice)

        assert bunny.files == {f"site/{name}": name.encode() for name in names}
        assert [path for method, path, _ in bunny.requests if method == "DELETE"] == []
