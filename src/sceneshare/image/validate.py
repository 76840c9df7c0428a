"""Image validation: MIME detection, data-URI decoding, size checks.

Used by the ingestion step before any image reaches the upload
orchestrator.
"""

from __future__ import annotations

import base64
import binascii
import mimetypes
import re
from urllib.parse import unquote_to_bytes

from sceneshare.config import SceneShareConfig
from sceneshare.errors import ImageParseError, ImageSizeError, ImageTypeError

# data:[<mediatype>][;base64],<data>
_DATA_URI_RE = re.compile(
    r"^data:(?P<mime>[^;,]+)?(?:;[^;,]+=[^;,]+)*(?:;(?P<encoding>base64))?,(?P<data>.*)$",
    re.IGNORECASE | re.DOTALL,
)

_MAGIC_BYTES: list[tuple[bytes, str]] = [
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"RIFF", "image/webp"),  # RIFF....WEBP
    (b"<svg", "image/svg+xml"),
    (b"<?xml", "image/svg+xml"),
    (b"BM", "image/bmp"),
]

_EXTENSION_OVERRIDES: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/svg+xml": ".svg",
}


def sniff_mime(data: bytes) -> str | None:
    """Detect the MIME type from the leading bytes of *data*."""
    for magic, mime in _MAGIC_BYTES:
        if data[:len(magic)] == magic:
            if magic == b"RIFF" and data[8:12] != b"WEBP":
                continue
            return mime
    return None


def detect_mime(name: str, data: bytes) -> str:
    """Return the MIME type of an image, sniffing bytes before the extension."""
    mime = sniff_mime(data)
    if mime is None:
        mime, _ = mimetypes.guess_type(name)
    return mime or "application/octet-stream"


def mime_to_extension(mime_type: str) -> str:
    """Map a MIME type to a file extension (``.png``), or ``.bin``."""
    if mime_type in _EXTENSION_OVERRIDES:
        return _EXTENSION_OVERRIDES[mime_type]
    return mimetypes.guess_extension(mime_type) or ".bin"


def parse_data_uri(src: str) -> tuple[str, bytes]:
    """Parse a ``data:`` URI and return ``(mime_type, decoded_bytes)``.

    Raises
    ------
    ImageParseError
        If the URI is malformed or its payload cannot be decoded.
    """
    match = _DATA_URI_RE.match(src.strip())
    if not match:
        raise ImageParseError(
            message="Invalid data URI format",
            context={"src": _truncate_src(src), "reason": "regex_no_match"},
        )

    mime_type = (match.group("mime") or "application/octet-stream").lower()
    raw_data = match.group("data")

    if match.group("encoding"):
        try:
            decoded = base64.b64decode(raw_data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ImageParseError(
                message="Failed to decode base64 data URI",
                context={"src": _truncate_src(src), "reason": "base64_decode_error"},
                cause=exc,
            ) from exc
    else:
        decoded = unquote_to_bytes(raw_data)

    return mime_type, decoded


def validate_image(
    name: str,
    mime_type: str,
    data: bytes,
    config: SceneShareConfig,
) -> None:
    """Check *mime_type* against the allowlist and *data* against the size cap.

    Raises
    ------
    ImageTypeError
        If *mime_type* is not in ``config.image_allowed_mimes``.
    ImageSizeError
        If *data* is larger than ``config.image_max_size_bytes``.
    """
    allowed = config.image_allowed_mimes
    if mime_type not in allowed:
        raise ImageTypeError(
            message=f"Image type {mime_type!r} is not supported",
            context={
                "src": _truncate_src(name),
                "detected_mime": mime_type,
                "allowed_mimes": allowed,
            },
        )

    if len(data) > config.image_max_size_bytes:
        raise ImageSizeError(
            message=(
                f"Image {name!r} is {len(data)} bytes, larger than the "
                f"{config.image_max_size_bytes} byte limit"
            ),
            context={
                "src": _truncate_src(name),
                "size_bytes": len(data),
                "max_bytes": config.image_max_size_bytes,
            },
        )


def _truncate_src(src: str, max_len: int = 200) -> str:
    if len(src) <= max_len:
        return src
    return src[:max_len] + "..."
