"""Metric names and the pluggable metrics backend.

Components emit through whatever object is passed as
``SceneShareConfig.metrics``; :func:`resolve_metrics` substitutes a no-op
backend when none is configured.  Every emitted name is one of the
constants below.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

REQUESTS_TOTAL = "sceneshare.requests_total"
"""Counter, one per asset-host request.  Tags: ``method``, ``status``."""

REQUEST_DURATION_MS = "sceneshare.request_duration_ms"
"""Timing of asset-host requests that got a response."""

UPLOAD_SUCCESS_TOTAL = "sceneshare.upload_success_total"
"""Counter, one per image that reached the asset host."""

UPLOAD_FAILURE_TOTAL = "sceneshare.upload_failure_total"
"""Counter, one per failed image.  Tags: ``error`` (exception class)."""

UPLOAD_BATCH_SIZE = "sceneshare.upload_batch_size"
"""Gauge, number of images in the batch being uploaded."""

SHARE_LINKS_TOTAL = "sceneshare.share_links_total"
"""Counter, one per finished share link."""

SHARE_FAILURES_TOTAL = "sceneshare.share_failures_total"
"""Counter, one per failed share attempt.  Tags: ``code``."""

METRIC_NAMES: tuple[str, ...] = (
    REQUESTS_TOTAL,
    REQUEST_DURATION_MS,
    UPLOAD_SUCCESS_TOTAL,
    UPLOAD_FAILURE_TOTAL,
    UPLOAD_BATCH_SIZE,
    SHARE_LINKS_TOTAL,
    SHARE_FAILURES_TOTAL,
)


@runtime_checkable
class MetricsHook(Protocol):
    """Shape of a metrics backend (statsd, Prometheus adapter, test recorder)."""

    def increment(self, name: str, value: int = 1, tags: dict[str, str] | None = None) -> None:
        ...

    def timing(self, name: str, ms: float, tags: dict[str, str] | None = None) -> None:
        ...

    def gauge(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        ...


class NoopMetricsHook:
    """Backend used when no metrics are configured."""

    __slots__ = ()

    def increment(self, name: str, value: int = 1, tags: dict[str, str] | None = None) -> None:
        return None

    def timing(self, name: str, ms: float, tags: dict[str, str] | None = None) -> None:
        return None

    def gauge(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        return None


def resolve_metrics(hook: MetricsHook | None) -> MetricsHook:
    """Return *hook*, or a :class:`NoopMetricsHook` when it is ``None``."""
    return hook if hook is not None else NoopMetricsHook()
