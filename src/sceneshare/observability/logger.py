"""JSON-lines logging for sceneshare.

All SDK loggers live under the ``sceneshare`` namespace.  One handler is
attached to that namespace root, so each component logger only needs a
short name::

    from sceneshare.observability import get_logger

    log = get_logger("pipeline")          # -> "sceneshare.pipeline"
    log.info("Share link ready", extra={"extra_fields": {"op": "share", "photos": 3}})

Each record becomes one line::

    {"ts": "2026-10-19T12:00:00.123456+00:00", "level": "INFO",
     "logger": "sceneshare.pipeline", "message": "Share link ready",
     "op": "share", "photos": 3}

The namespace level is set from ``SceneShareConfig.log_level`` when a
client is built (see :func:`set_log_level`).
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

ROOT_LOGGER = "sceneshare"


class StructuredFormatter(logging.Formatter):
    """Render a record as a single JSON object.

    ``ts`` is the record's creation time in UTC.  Fields passed as
    ``extra={"extra_fields": {...}}`` are merged at the top level; a
    formatted traceback is added under ``exception`` when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(getattr(record, "extra_fields", None) or {})
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


def _root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not any(isinstance(h.formatter, StructuredFormatter) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(StructuredFormatter())
        root.addHandler(handler)
        root.setLevel(logging.INFO)
        # Applications configuring the root logger would print each line twice.
        root.propagate = False
    return root


def get_logger(component: str) -> logging.Logger:
    """Return the logger for one SDK component (``"upload"``, ``"pipeline"``, ...)."""
    _root()
    return logging.getLogger(f"{ROOT_LOGGER}.{component}")


def set_log_level(level: int | str) -> None:
    """Set the minimum level for every sceneshare logger.

    *level* is a :mod:`logging` constant or a case-insensitive level name.

    Raises
    ------
    ValueError
        If *level* is not a known level name.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level {level!r}")
        level = resolved
    _root().setLevel(level)
