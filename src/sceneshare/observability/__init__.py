"""Observability: JSON-lines logging and metrics for sceneshare."""

from __future__ import annotations

from . import metrics
from .logger import StructuredFormatter, get_logger, set_log_level
from .metrics import MetricsHook, NoopMetricsHook, resolve_metrics

__all__ = [
    "MetricsHook",
    "NoopMetricsHook",
    "StructuredFormatter",
    "get_logger",
    "metrics",
    "resolve_metrics",
    "set_log_level",
]
