"""Utility helpers for sceneshare."""

from .redact import redact

__all__ = ["redact"]
