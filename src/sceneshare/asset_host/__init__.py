"""Asset host access: HTTP transport and the image upload endpoint."""

from __future__ import annotations

from .transport import AsyncAssetHostTransport
from .uploads import AssetUploader, AsyncUploadAPI

__all__ = [
    "AssetUploader",
    "AsyncAssetHostTransport",
    "AsyncUploadAPI",
]
