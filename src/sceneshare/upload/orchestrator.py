"""Concurrent upload of a batch of images with ordered fan-in.

:class:`UploadOrchestrator` submits one upload per image at once, reports
``(completed, total)`` progress as each upload finishes, and returns the
remote URLs in selection order.  A single failed upload fails the whole
batch; already-uploaded URLs are never returned on their own.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Sequence

from sceneshare.config import SceneShareConfig
from sceneshare.errors import EmptyBatchError, UploadFailedError
from sceneshare.models import LocalImage, UploadProgress
from sceneshare.observability import get_logger, resolve_metrics
from sceneshare.observability import metrics as m

from .batch import UploadBatch, UploadTask

log = get_logger("upload")

ProgressCallback = Callable[[UploadProgress], None]


class UploadOrchestrator:
    """Fan out uploads for one batch and fan the results back in.

    Parameters
    ----------
    uploader:
        Any object with ``async upload(image) -> str``, normally an
        :class:`~sceneshare.asset_host.AsyncUploadAPI` bound to the
        configured upload target.
    config:
        Supplies ``upload_max_concurrent``, ``upload_failure_policy`` and
        the metrics backend.
    """

    def __init__(self, uploader, config: SceneShareConfig) -> None:
        self._uploader = uploader
        self._config = config
        self._metrics = resolve_metrics(config.metrics)
        self.last_batch: UploadBatch | None = None

    async def upload_all(
        self,
        images: Sequence[LocalImage],
        on_progress: ProgressCallback | None = None,
    ) -> list[str]:
        """Upload every image concurrently and return URLs in input order.

        Parameters
        ----------
        images:
            Non-empty, ordered images to upload.
        on_progress:
            Called with the updated :class:`UploadProgress` each time an
            upload finishes.  Never called for the initial state.  Exceptions it
            raises are logged and do not affect the upload.

        Returns
        -------
        list[str]
            Remote URLs; ``result[i]`` belongs to ``images[i]``.

        Raises
        ------
        EmptyBatchError
            If *images* is empty.  No request is issued.
        UploadFailedError
            If any upload fails.  ``index`` is the 1-based position of the
            failed image; when several failures are seen together the
            lowest position wins.
        """
        if not images:
            raise EmptyBatchError(context={"total": 0})

        batch = UploadBatch(images)
        self.last_batch = batch
        fail_fast = self._config.upload_failure_policy == "first"
        limit = self._config.upload_max_concurrent
        semaphore = asyncio.Semaphore(limit) if limit is not None else None

        self._metrics.gauge(m.UPLOAD_BATCH_SIZE, batch.total)
        log.info(
            "Upload batch started",
            extra={
                "extra_fields": {
                    "op": "upload_batch",
                    "batch_id": batch.batch_id,
                    "total": batch.total,
                    "policy": self._config.upload_failure_policy,
                }
            },
        )

        async def _run_one(task: UploadTask) -> str:
            if semaphore is None:
                return await self._upload_task(batch, task, on_progress)
            async with semaphore:
                return await self._upload_task(batch, task, on_progress)

        t0 = time.monotonic()
        runners = [asyncio.create_task(_run_one(task)) for task in batch.tasks]
        try:
            await asyncio.wait(
                runners,
                return_when=asyncio.FIRST_EXCEPTION if fail_fast else asyncio.ALL_COMPLETED,
            )
        finally:
            # Stragglers are cancelled and their results discarded.
            for runner in runners:
                if not runner.done():
                    runner.cancel()
            await asyncio.gather(*runners, return_exceptions=True)

        for task in batch.tasks:
            batch.abandon(task, asyncio.CancelledError("sibling upload failed"))

        failed = batch.failed_tasks()
        if failed:
            first = failed[0]
            log.warning(
                "Upload batch failed",
                extra={
                    "extra_fields": {
                        "op": "upload_batch",
                        "batch_id": batch.batch_id,
                        "failed_index": first.position,
                        "failed_count": len(failed),
                        "total": batch.total,
                        "error": str(first.error),
                    }
                },
            )
            raise UploadFailedError(
                index=first.position,
                context={
                    "total": batch.total,
                    "name": first.image.name,
                    "reason": str(first.error),
                },
                cause=first.error,
            )

        urls = batch.urls()
        log.info(
            "Upload batch complete",
            extra={
                "extra_fields": {
                    "op": "upload_batch",
                    "batch_id": batch.batch_id,
                    "total": batch.total,
                    "duration_ms": round((time.monotonic() - t0) * 1000, 1),
                }
            },
        )
        return urls

    async def _upload_task(
        self,
        batch: UploadBatch,
        task: UploadTask,
        on_progress: ProgressCallback | None,
    ) -> str:
        task.start()
        try:
            url = await self._uploader.upload(task.image)
        except Exception as exc:
            # Transport errors, host rejections, malformed responses and
            # timeouts all count as "upload failed for this item".
            progress = batch.record_failure(task, exc)
            self._metrics.increment(
                m.UPLOAD_FAILURE_TOTAL,
                tags={"error": type(exc).__name__},
            )
            self._emit(on_progress, progress)
            raise

        progress = batch.record_success(task, url)
        self._metrics.increment(m.UPLOAD_SUCCESS_TOTAL)
        log.debug(
            "Upload finished",
            extra={
                "extra_fields": {
                    "op": "upload",
                    "batch_id": batch.batch_id,
                    "index": task.position,
                    "completed": progress.completed,
                    "total": progress.total,
                }
            },
        )
        self._emit(on_progress, progress)
        return url

    @staticmethod
    def _emit(on_progress: ProgressCallback | None, progress: UploadProgress) -> None:
        if on_progress is None:
            return
        try:
            on_progress(progress)
        except Exception as exc:
            # A broken listener must not turn a finished upload into a failure.
            log.warning(
                "Progress listener failed",
                extra={
                    "extra_fields": {
                        "op": "progress",
                        "completed": progress.completed,
                        "total": progress.total,
                        "error": repr(exc),
                    }
                },
            )
