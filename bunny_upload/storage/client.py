"""
Synchronous Bunny Storage API client.

Used for single-file operations (upload_file / delete_file) outside the
async directory sync. Handles retries for transient failures; 404 and
other client errors are raised immediately.
"""

import time
from pathlib import Path
from typing import Any, List, Optional, Union

import requests

from ..config import UploadOptions
from ..core.paths import build_url, join_key, listing_path
from ..exceptions import NotFound, TransportError
from .listing import RemoteEntry, parse_listing

# Statuses worth retrying (rate limiting and server errors)
RETRYABLE_STATUSES = {429, 500, 502, 503, 504}


class StorageClient:
    """
    Bunny Storage API client (requests).

    PUT uploads a file, GET on a directory path lists it, DELETE removes a
    file or directory.
    """

    def __init__(self, options: UploadOptions, retry_delay: float = 1.0):
        self.options = options
        self.retry_delay = retry_delay
        self._api_calls = 0

    @property
    def api_calls(self) -> int:
        """Total API calls made by this client."""
        return self._api_calls

    def url_for(self, path: str) -> str:
        return build_url(path, self.options.storage_zone_name, self.options.region)

    def _get_headers(self, **extra) -> dict:
        return {"AccessKey": self.options.access_key, **extra}

    def _request_with_retry(
        self,
        method: str,
        path: str,
        source_path: Optional[Path] = None,
        headers: Optional[dict] = None,
    ) -> requests.Response:
        """
        Make a request with retry logic.

        When source_path is given, the file is reopened and streamed as the
        body on every attempt. OSError from opening it is not retried.
        """
        url = self.url_for(path)
        headers = headers or self._get_headers()
        max_retries = self.options.max_retries

        for attempt in range(max_retries):
            last_attempt = attempt == max_retries - 1
            try:
                if source_path is not None:
                    with open(source_path, "rb") as body:
                        response = requests.request(
                            method, url, data=body, headers=headers, timeout=self.options.timeout
                        )
                else:
                    response = requests.request(method, url, headers=headers, timeout=self.options.timeout)
                self._api_calls += 1
            except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
                if not last_attempt:
                    time.sleep(self.retry_delay * (attempt + 1))
                    continue
                raise TransportError(f"{method} {path}: {e}", method=method, url=url) from e

            if response.status_code == 404:
                raise NotFound(f"{method} {path}: not found", method=method, url=url)
            if response.status_code in RETRYABLE_STATUSES and not last_attempt:
                time.sleep(self.retry_delay * (attempt + 1))
                continue
            if response.status_code >= 400:
                raise TransportError(
                    f"{method} {path}: HTTP {response.status_code} {response.text[:200]}".rstrip(),
                    status=response.status_code,
                    method=method,
                    url=url,
                )
            return response

        raise TransportError(f"{method} {path}: failed after {max_retries} attempts", method=method, url=url)

    def list_directory(self, remote_dir: str) -> List[RemoteEntry]:
        """
        List one level of a remote directory.

        Raises NotFound if the directory doesn't exist.
        """
        response = self._request_with_retry("GET", listing_path(remote_dir))
        try:
            data: Any = response.json()
        except ValueError:
            return []
        return parse_listing(data)

    def put_file(self, source_path: Union[str, Path], key: str) -> int:
        """
        Upload a local file to key.

        Returns number of bytes sent.
        """
        source_path = Path(source_path)
        size = source_path.stat().st_size
        self._request_with_retry(
            "PUT",
            join_key(key),
            source_path=source_path,
            headers=self._get_headers(**{"Content-Type": "application/octet-stream"}),
        )
        return size

    def delete(self, key: str):
        """Delete a file or directory. Raises NotFound if it doesn't exist."""
        self._request_with_retry("DELETE", join_key(key))
