"""Public data models for the sceneshare SDK.

This module contains the value types and enums referenced by the public
API surface.  All types are plain dataclasses with no behaviour beyond
what is needed for structural equality, hashing (where frozen), and a
few read-only conveniences.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class UploadState(str, Enum):
    """Lifecycle states of a single upload task."""

    PENDING = "pending"
    """Created, request not issued yet."""

    IN_FLIGHT = "in_flight"
    """The upload request has been sent and not yet answered."""

    SUCCEEDED = "succeeded"
    """The asset host returned a remote URL."""

    FAILED = "failed"
    """The upload did not succeed (or was abandoned with its batch)."""


class PipelineStatus(str, Enum):
    """Lifecycle states of one user-initiated share attempt."""

    IDLE = "idle"
    UPLOADING = "uploading"
    ENCODING = "encoding"
    READY = "ready"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LocalImage:
    """An in-memory image payload ready for upload.

    Attributes
    ----------
    data:
        Raw image bytes.
    index:
        0-based position in the user's selection order.
    name:
        File name sent to the asset host.
    content_type:
        Detected MIME type.
    """

    data: bytes = field(repr=False)
    index: int
    name: str = "image"
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)


# ---------------------------------------------------------------------------
# Progress and results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UploadProgress:
    """Number of uploads that have finished out of the batch total."""

    completed: int
    total: int

    def __str__(self) -> str:
        return f"{self.completed}/{self.total}"


@dataclass(frozen=True)
class ShareLink:
    """A finished shareable link.

    Attributes
    ----------
    url:
        The full link: base page address, share parameter, and token.
    token:
        The URL-safe encoded form of *asset_urls*.
    asset_urls:
        The ordered remote asset URLs the token decodes to.
    """

    url: str
    token: str
    asset_urls: tuple[str, ...]

    def __str__(self) -> str:
        return self.url


@dataclass(frozen=True)
class PipelineState:
    """Immutable snapshot of a share attempt, as shown to the presentation shell.

    Attributes
    ----------
    status:
        Current :class:`PipelineStatus`.
    progress:
        Upload progress while ``UPLOADING`` (and the final count afterwards).
    link:
        The finished link; only set when ``status`` is ``READY``.
    error:
        The error that ended the attempt; only set when ``status`` is
        ``FAILED``.
    attempt:
        Sequence number of the share attempt this snapshot belongs to.
    """

    status: PipelineStatus = PipelineStatus.IDLE
    progress: UploadProgress | None = None
    link: ShareLink | None = None
    error: Exception | None = None
    attempt: int = 0

    @property
    def is_busy(self) -> bool:
        return self.status in (PipelineStatus.UPLOADING, PipelineStatus.ENCODING)

    @property
    def can_retry(self) -> bool:
        return self.status in (PipelineStatus.READY, PipelineStatus.FAILED)

    @property
    def error_message(self) -> str | None:
        """Human-readable classification of ``error``, or ``None``."""
        if self.error is None:
            return None
        message = getattr(self.error, "message", None)
        return message or str(self.error) or "Sharing failed, please try again"
