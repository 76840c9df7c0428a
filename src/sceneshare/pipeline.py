"""Share pipeline state machine: uploads, then encoding, then a ready link.

Valid transitions::

    IDLE       -> UPLOADING | FAILED      (share; FAILED when nothing is selected)
    UPLOADING  -> ENCODING | FAILED
    ENCODING   -> READY | FAILED
    READY      -> IDLE                    (retry)
    FAILED     -> IDLE                    (retry)

Every error raised by the upload orchestrator or the encoder ends the
attempt in ``FAILED``; :meth:`SharePipeline.share` returns the final
snapshot instead of raising.  Listeners receive every snapshot, including
each progress update, which is what the presentation shell renders.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import replace

from sceneshare.config import SceneShareConfig
from sceneshare.errors import (
    ClipboardUnavailableError,
    EmptyBatchError,
    PipelineBusyError,
    PipelineStateError,
    SceneShareError,
)
from sceneshare.models import LocalImage, PipelineState, PipelineStatus, ShareLink, UploadProgress
from sceneshare.observability import get_logger, resolve_metrics
from sceneshare.observability import metrics as m
from sceneshare.share import build_share_link
from sceneshare.upload import UploadOrchestrator

log = get_logger("pipeline")

StateListener = Callable[[PipelineState], None]
Clipboard = Callable[[str], "Awaitable[None] | None"]


class SharePipeline:
    """Drive one share attempt at a time from selected images to a link.

    Parameters
    ----------
    orchestrator:
        The :class:`UploadOrchestrator` used for the upload stage.
    config:
        Supplies ``share_base_url``, ``share_param`` and metrics.
    """

    VALID_TRANSITIONS: dict[PipelineStatus, set[PipelineStatus]] = {
        PipelineStatus.IDLE: {PipelineStatus.UPLOADING, PipelineStatus.FAILED},
        PipelineStatus.UPLOADING: {
            PipelineStatus.UPLOADING,
            PipelineStatus.ENCODING,
            PipelineStatus.FAILED,
        },
        PipelineStatus.ENCODING: {PipelineStatus.READY, PipelineStatus.FAILED},
        PipelineStatus.READY: {PipelineStatus.IDLE},
        PipelineStatus.FAILED: {PipelineStatus.IDLE},
    }

    def __init__(self, orchestrator: UploadOrchestrator, config: SceneShareConfig) -> None:
        self._orchestrator = orchestrator
        self._config = config
        self._metrics = resolve_metrics(config.metrics)
        self._state = PipelineState()
        self._listeners: list[StateListener] = []

    # -- observation -------------------------------------------------------

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def share_link(self) -> ShareLink | None:
        """The finished link, only while the pipeline is ``READY``."""
        if self._state.status is PipelineStatus.READY:
            return self._state.link
        return None

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register *listener* for state snapshots; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # -- actions -----------------------------------------------------------

    async def share(self, images: Sequence[LocalImage]) -> PipelineState:
        """Run one share attempt and return its final state.

        Raises
        ------
        PipelineBusyError
            If an attempt is already ``UPLOADING`` or ``ENCODING``.
        PipelineStateError
            If the previous attempt has not been reset with :meth:`retry`.
        asyncio.CancelledError
            Re-raised after the attempt has been moved to ``FAILED``.
        """
        attempt = self._next_attempt()
        if not images:
            return self._fail(attempt, EmptyBatchError(context={"total": 0}))

        total = len(images)
        self._transition(
            PipelineStatus.UPLOADING,
            attempt=attempt,
            progress=UploadProgress(completed=0, total=total),
        )

        def _on_progress(progress: UploadProgress) -> None:
            # Late progress from an earlier attempt must not leak into this one.
            if self._state.attempt == attempt and self._state.status is PipelineStatus.UPLOADING:
                self._transition(PipelineStatus.UPLOADING, progress=progress)

        try:
            urls = await self._orchestrator.upload_all(images, on_progress=_on_progress)
            self._transition(PipelineStatus.ENCODING)
            link = build_share_link(
                urls,
                self._config.share_base_url,
                self._config.share_param,
            )
        except asyncio.CancelledError as exc:
            # A cancelled attempt must not leave the pipeline busy.
            self._fail(attempt, exc)
            raise
        except SceneShareError as exc:
            return self._fail(attempt, exc)
        except Exception as exc:
            log.error(
                "Unexpected error while sharing",
                exc_info=True,
                extra={"extra_fields": {"op": "share", "attempt": attempt}},
            )
            return self._fail(attempt, exc)

        self._metrics.increment(m.SHARE_LINKS_TOTAL)
        log.info(
            "Share link ready",
            extra={
                "extra_fields": {
                    "op": "share",
                    "attempt": attempt,
                    "photos": len(link.asset_urls),
                    "link_length": len(link.url),
                }
            },
        )
        return self._transition(PipelineStatus.READY, link=link)

    def fail_before_upload(self, error: Exception) -> PipelineState:
        """End a new attempt in ``FAILED`` without uploading anything.

        Used when the selection itself cannot be ingested.  Same guards as
        :meth:`share`.
        """
        return self._fail(self._next_attempt(), error)

    def retry(self) -> PipelineState:
        """Discard the finished attempt and return to ``IDLE``.

        Calling it while already ``IDLE`` is a no-op.

        Raises
        ------
        PipelineBusyError
            If an attempt is still running.
        """
        current = self._state
        if current.is_busy:
            raise PipelineBusyError(
                message="Cannot reset while a share link is being generated",
                context={"current_state": current.status.value, "requested": "retry"},
            )
        if current.status is PipelineStatus.IDLE:
            return current
        self._state = PipelineState(attempt=current.attempt)
        self._notify()
        return self._state

    async def copy_link(self, clipboard: Clipboard) -> bool:
        """Write the ready link through *clipboard*.

        *clipboard* may be a plain function or a coroutine function taking
        the link text.  Returns ``False`` when there is no ready link.

        Raises
        ------
        ClipboardUnavailableError
            If *clipboard* fails.  The pipeline state is left unchanged.
        """
        link = self.share_link
        if link is None:
            return False
        try:
            result = clipboard(link.url)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            log.warning(
                "Copying share link failed",
                extra={"extra_fields": {"op": "copy_link", "error": str(exc)}},
            )
            raise ClipboardUnavailableError(
                context={"reason": type(exc).__name__},
                cause=exc,
            ) from exc
        return True

    # -- internals ---------------------------------------------------------

    def _next_attempt(self) -> int:
        current = self._state
        if current.is_busy:
            raise PipelineBusyError(
                message="A share link is already being generated",
                context={"current_state": current.status.value, "requested": "share"},
            )
        if current.status is not PipelineStatus.IDLE:
            raise PipelineStateError(
                message=f"Cannot share from state {current.status.value}; call retry() first",
                context={"current_state": current.status.value, "requested": "share"},
            )
        return current.attempt + 1

    def _fail(self, attempt: int, error: Exception) -> PipelineState:
        code = getattr(error, "code", type(error).__name__)
        self._metrics.increment(
            m.SHARE_FAILURES_TOTAL,
            tags={"code": str(getattr(code, "value", code))},
        )
        log.warning(
            "Share attempt failed",
            extra={
                "extra_fields": {
                    "op": "share",
                    "attempt": attempt,
                    "error": repr(error),
                }
            },
        )
        return self._transition(PipelineStatus.FAILED, attempt=attempt, error=error)

    def _transition(self, status: PipelineStatus, **fields) -> PipelineState:
        allowed = self.VALID_TRANSITIONS[self._state.status]
        if status not in allowed:
            raise PipelineStateError(
                message=f"Invalid pipeline transition: {self._state.status.value} -> {status.value}",
                context={"current_state": self._state.status.value, "requested": status.value},
            )
        self._state = replace(self._state, status=status, **fields)
        self._notify()
        return self._state

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._state)
