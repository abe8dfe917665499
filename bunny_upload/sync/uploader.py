"""
File uploader for Bunny Upload.

Runs uploads concurrently with asyncio, keeping at most max_workers PUTs
in flight. The first failure stops tasks that haven't started yet; uploads
already in flight finish, since a partial remote write can't be undone.
"""

import asyncio
from dataclasses import dataclass
from typing import List, Optional

from ..config import DEFAULT_MAX_CONCURRENT_UPLOADS
from ..core.progress import SyncProgress
from ..exceptions import ConfigError, TransportError, UploadError
from .upload_planner import UploadTask


@dataclass
class UploadResult:
    """Result of a single file upload."""
    success: bool
    task: UploadTask
    message: str
    bytes_uploaded: int = 0
    skipped: bool = False  # never started because an earlier upload failed
    error: Optional[BaseException] = None

    @property
    def failed(self) -> bool:
        return not self.success and not self.skipped


class FileUploader:
    """
    Bounded-concurrency uploader.

    client is anything with an awaitable put_file(source_path, key) -> int,
    normally an open AsyncStorageClient.
    """

    def __init__(self, client, max_workers: int = DEFAULT_MAX_CONCURRENT_UPLOADS):
        if isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1:
            raise ConfigError(f"max_workers must be a positive integer, got {max_workers!r}")
        self.client = client
        self.max_workers = max_workers

    async def _upload_file_async(
        self,
        task: UploadTask,
        semaphore: asyncio.Semaphore,
        abort: asyncio.Event,
        progress: SyncProgress,
    ) -> UploadResult:
        """Upload a single file once a worker slot is free."""
        async with semaphore:
            if abort.is_set():
                progress.upload_skipped()
                return UploadResult(
                    success=False,
                    task=task,
                    message=f"SKIP (aborted): {task.target_key}",
                    skipped=True,
                )

            try:
                size = await self.client.put_file(task.source_path, task.target_key)
            except TransportError as e:
                abort.set()
                status = f"HTTP {e.status}" if e.status else "transport"
                result = UploadResult(
                    success=False,
                    task=task,
                    message=f"ERR ({status}): {task.target_key} - {e}",
                    error=e,
                )
                progress.upload_failed(result.message)
                return result
            except OSError as e:
                abort.set()
                result = UploadResult(
                    success=False,
                    task=task,
                    message=f"ERR (read): {task.source_path} - {e}",
                    error=e,
                )
                progress.upload_failed(result.message)
                return result

        progress.file_uploaded(task.target_key, size)
        return UploadResult(
            success=True,
            task=task,
            message=f"OK: {task.target_key}",
            bytes_uploaded=size,
        )

    async def upload_many_async(
        self,
        tasks: List[UploadTask],
        progress: Optional[SyncProgress] = None,
    ) -> List[UploadResult]:
        """
        Upload every task, at most max_workers at a time.

        Returns results in completion order. Raises UploadError once all
        started uploads have settled if any of them failed.
        """
        if not tasks:
            return []

        progress = progress or SyncProgress(total_files=len(tasks), quiet=True)
        semaphore = asyncio.Semaphore(self.max_workers)
        abort = asyncio.Event()

        pending = {
            asyncio.create_task(
                self._upload_file_async(task, semaphore, abort, progress),
                name=task.target_key,
            ): task
            for task in tasks
        }

        results: List[UploadResult] = []
        try:
            while pending:
                done, _ = await asyncio.wait(pending.keys(), return_when=asyncio.FIRST_COMPLETED)
                for async_task in done:
                    pending.pop(async_task)
                    results.append(async_task.result())
        finally:
            # Only reached with work left if something unexpected was raised
            for async_task in pending:
                async_task.cancel()

        failures = [r for r in results if r.failed]
        if failures:
            raise UploadError(failures, total=len(tasks))
        return results
