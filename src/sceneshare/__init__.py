"""sceneshare — turn selected photos into a self-contained share link.

Public re-exports
-----------------

* **Client:** :class:`AsyncSceneShareClient`
* **Pipeline:** :class:`SharePipeline`, :class:`UploadOrchestrator`
* **Share links:** :func:`encode_token`, :func:`decode_token`,
  :func:`build_share_link`, :func:`parse_share_link`
* **Configuration:** :class:`SceneShareConfig`, :class:`UploadTarget`
* **Errors:** Every :class:`SceneShareError` subclass and :class:`ErrorCode`
* **Models:** Value types and enums

Usage::

    from sceneshare import AsyncSceneShareClient

    async with AsyncSceneShareClient(cloud_name="c", upload_preset="p") as client:
        state = await client.share_files(["tree.jpg"])
"""

from __future__ import annotations

# ── Client ──────────────────────────────────────────────────────────────
from sceneshare.client import AsyncSceneShareClient

# ── Configuration ───────────────────────────────────────────────────────
from sceneshare.config import DEFAULT_IMAGE_MIMES, SceneShareConfig, UploadTarget

# ── Errors ──────────────────────────────────────────────────────────────
from sceneshare.errors import (
    AssetHostError,
    AssetHostNetworkError,
    AssetHostRejectedError,
    AssetHostResponseError,
    ClipboardUnavailableError,
    EmptyBatchError,
    ErrorCode,
    ImageError,
    ImageNotFoundError,
    ImageParseError,
    ImageSizeError,
    ImageTypeError,
    MalformedShareTokenError,
    PipelineBusyError,
    PipelineStateError,
    SceneShareError,
    UploadFailedError,
)

# ── Models ──────────────────────────────────────────────────────────────
from sceneshare.models import (
    LocalImage,
    PipelineState,
    PipelineStatus,
    ShareLink,
    UploadProgress,
    UploadState,
)

# ── Pipeline ────────────────────────────────────────────────────────────
from sceneshare.pipeline import SharePipeline
from sceneshare.share import (
    build_share_link,
    decode_token,
    encode_token,
    parse_share_link,
)
from sceneshare.upload import UploadOrchestrator

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_IMAGE_MIMES",
    "AssetHostError",
    "AssetHostNetworkError",
    "AssetHostRejectedError",
    "AssetHostResponseError",
    "AsyncSceneShareClient",
    "ClipboardUnavailableError",
    "EmptyBatchError",
    "ErrorCode",
    "ImageError",
    "ImageNotFoundError",
    "ImageParseError",
    "ImageSizeError",
    "ImageTypeError",
    "LocalImage",
    "MalformedShareTokenError",
    "PipelineBusyError",
    "PipelineState",
    "PipelineStateError",
    "PipelineStatus",
    "SceneShareConfig",
    "SceneShareError",
    "ShareLink",
    "SharePipeline",
    "UploadFailedError",
    "UploadOrchestrator",
    "UploadProgress",
    "UploadState",
    "UploadTarget",
    "build_share_link",
    "decode_token",
    "encode_token",
    "parse_share_link",
]
