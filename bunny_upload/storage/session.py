"""
Asynchronous Bunny Storage API client.

Uses asyncio + aiohttp so the sync engine can keep many uploads in flight
over one connection pool. Must be used as an async context manager:

    async with AsyncStorageClient(options) as client:
        await client.put_file(path, "site/index.html")
"""

import asyncio
import ssl
from pathlib import Path
from typing import Any, List, Optional, Union

import aiohttp
import certifi
from yarl import URL

from ..config import UploadOptions
from ..core.paths import build_url, join_key, listing_path
from ..exceptions import NotFound, TransportError
from .client import RETRYABLE_STATUSES
from .listing import RemoteEntry, parse_listing


class AsyncStorageClient:
    """Bunny Storage API client (aiohttp)."""

    def __init__(
        self,
        options: UploadOptions,
        max_connections: Optional[int] = None,
        retry_delay: float = 0.5,
    ):
        self.options = options
        self.max_connections = max_connections or options.max_concurrent_uploads
        self.retry_delay = retry_delay
        self.timeout = aiohttp.ClientTimeout(connect=options.timeout[0], sock_read=options.timeout[1])
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "AsyncStorageClient":
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(
            limit=self.max_connections * 2,
            limit_per_host=self.max_connections,
            ttl_dns_cache=300,
            keepalive_timeout=30,
            ssl=ssl_context,
        )
        self._session = aiohttp.ClientSession(timeout=self.timeout, connector=connector)
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self._session is not None:
            await self._session.close()
            self._session = None

    def url_for(self, path: str) -> str:
        return build_url(path, self.options.storage_zone_name, self.options.region)

    def _get_headers(self, **extra) -> dict:
        return {"AccessKey": self.options.access_key, **extra}

    async def _send(self, method: str, url: str, headers: dict, source_path: Optional[Path], want_json: bool):
        """One attempt. Returns (status, payload); payload is parsed JSON or error text."""
        url = URL(url, encoded=True)  # already percent-encoded by build_url
        if source_path is not None:
            with open(source_path, "rb") as body:
                async with self._session.request(method, url, headers=headers, data=body) as response:
                    return response.status, await response.text()

        async with self._session.request(method, url, headers=headers) as response:
            if want_json and response.status < 400:
                try:
                    return response.status, await response.json(content_type=None)
                except ValueError:
                    return response.status, None
            return response.status, await response.text()

    async def _request_with_retry(
        self,
        method: str,
        path: str,
        source_path: Optional[Path] = None,
        headers: Optional[dict] = None,
        want_json: bool = False,
    ) -> Any:
        if self._session is None:
            raise RuntimeError("AsyncStorageClient must be used inside 'async with'")

        url = self.url_for(path)
        headers = headers or self._get_headers()
        max_retries = self.options.max_retries

        for attempt in range(max_retries):
            last_attempt = attempt == max_retries - 1
            try:
                status, payload = await self._send(method, url, headers, source_path, want_json)
            except (asyncio.TimeoutError, aiohttp.ClientError) as e:
                if not last_attempt:
                    await asyncio.sleep(self.retry_delay * (attempt + 1))
                    continue
                raise TransportError(f"{method} {path}: {str(e) or type(e).__name__}", method=method, url=url) from e

            if status == 404:
                raise NotFound(f"{method} {path}: not found", method=method, url=url)
            if status in RETRYABLE_STATUSES and not last_attempt:
                await asyncio.sleep(self.retry_delay * (attempt + 1))
                continue
            if status >= 400:
                detail = payload[:200] if isinstance(payload, str) else ""
                raise TransportError(
                    f"{method} {path}: HTTP {status} {detail}".rstrip(),
                    status=status,
                    method=method,
                    url=url,
                )
            return payload

        raise TransportError(f"{method} {path}: failed after {max_retries} attempts", method=method, url=url)

    async def list_directory(self, remote_dir: str) -> List[RemoteEntry]:
        """List one level of a remote directory. Raises NotFound if missing."""
        data = await self._request_with_retry("GET", listing_path(remote_dir), want_json=True)
        return parse_listing(data)

    async def put_file(self, source_path: Union[str, Path], key: str) -> int:
        """Stream a local file to key. Returns number of bytes sent."""
        source_path = Path(source_path)
        size = source_path.stat().st_size
        await self._request_with_retry(
            "PUT",
            join_key(key),
            source_path=source_path,
            headers=self._get_headers(**{"Content-Type": "application/octet-stream"}),
        )
        return size

    async def delete(self, key: str):
        """Delete a file or directory. Raises NotFound if it doesn't exist."""
        await self._request_with_retry("DELETE", join_key(key))
