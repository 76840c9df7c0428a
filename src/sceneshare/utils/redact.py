"""Payload redaction for safe debug dumps.

Asset-host exchanges written by ``debug_dump_payload`` pass through
:func:`redact` first:

* Values under sensitive keys (``upload_preset``, ``api_key``,
  ``signature``, ...) are replaced with ``<redacted:...XXXX>``.
* Raw ``bytes`` (the uploaded image itself) become ``<binary:N_bytes>``.
* Base64 data URIs become ``<data_uri:N_bytes>``.
* Any explicitly supplied secret is scrubbed from every string.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Iterable
from typing import Any

_DATA_URI_RE = re.compile(
    r"data:[a-zA-Z0-9_.+-]+/[a-zA-Z0-9_.+-]+;base64,[A-Za-z0-9+/=]+"
)

# Substring match, case-insensitive.
_SENSITIVE_KEY_PATTERNS: frozenset[str] = frozenset({
    "upload_preset",
    "api_key",
    "api_secret",
    "signature",
    "token",
    "secret",
    "authorization",
    "cookie",
})


def _mask(value: str) -> str:
    suffix = value[-4:] if len(value) >= 8 else ""
    return f"<redacted:...{suffix}>" if suffix else "<redacted>"


def _redact_value(value: Any, secrets: tuple[str, ...]) -> Any:
    if isinstance(value, dict):
        return _redact_dict(value, secrets)
    if isinstance(value, (list, tuple)):
        return [_redact_value(item, secrets) for item in value]
    if isinstance(value, (bytes, bytearray)):
        return f"<binary:{len(value)}_bytes>"
    if isinstance(value, str):
        value = _DATA_URI_RE.sub(
            lambda m: f"<data_uri:{len(m.group(0).split(',', 1)[1]) * 3 // 4}_bytes>",
            value,
        )
        for secret in secrets:
            value = value.replace(secret, _mask(secret))
        return value
    return value


def _redact_dict(d: dict, secrets: tuple[str, ...]) -> dict:
    result: dict = {}
    for key, value in d.items():
        key_lower = key.lower() if isinstance(key, str) else ""
        if any(pat in key_lower for pat in _SENSITIVE_KEY_PATTERNS):
            result[key] = _mask(value) if isinstance(value, str) else "<redacted>"
        else:
            result[key] = _redact_value(value, secrets)
    return result


def redact(payload: dict, secrets: Iterable[str] = ()) -> dict:
    """Return a deep copy of *payload* with sensitive data removed.

    Parameters
    ----------
    payload:
        The dictionary to sanitize, typically a request/response record.
    secrets:
        Extra strings to scrub wherever they appear.  Empty strings are
        ignored.

    Returns
    -------
    dict
        A new dictionary; *payload* is never mutated.

    Examples
    --------
    >>> redact({"upload_preset": "unsigned_xmas"})
    {'upload_preset': '<redacted:...xmas>'}
    >>> redact({"file": b"\\x89PNG"})
    {'file': '<binary:4_bytes>'}
    """
    safe = copy.deepcopy(payload)
    return _redact_dict(safe, tuple(s for s in secrets if s))
