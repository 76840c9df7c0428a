"""Image upload wrapper for the asset host.

:class:`AsyncUploadAPI` turns one :class:`LocalImage` into one durable
remote URL:

1. ``POST /{cloud_name}/image/upload`` with a multipart body carrying the
   image bytes (``file``) and the unsigned preset (``upload_preset``).
2. Read ``secure_url`` from the JSON response.

Any object with the same ``async upload(image) -> str`` shape can stand in
for this class in the upload orchestrator.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from sceneshare.config import UploadTarget
from sceneshare.errors import AssetHostResponseError
from sceneshare.models import LocalImage

from .transport import AsyncAssetHostTransport


@runtime_checkable
class AssetUploader(Protocol):
    """Anything that can store one image and return its remote URL."""

    async def upload(self, image: LocalImage) -> str:
        ...


class AsyncUploadAPI:
    """Asynchronous wrapper for the asset host's unsigned upload endpoint.

    Parameters
    ----------
    transport:
        A configured :class:`AsyncAssetHostTransport` instance.
    target:
        The :class:`UploadTarget` every upload is sent to.
    """

    def __init__(self, transport: AsyncAssetHostTransport, target: UploadTarget) -> None:
        self._transport = transport
        self._target = target

    @property
    def target(self) -> UploadTarget:
        return self._target

    def upload_path(self) -> str:
        return f"/{self._target.cloud_name}/image/upload"

    async def upload(self, image: LocalImage) -> str:
        """Upload *image* and return the stable ``https`` URL of the stored asset.

        Raises
        ------
        AssetHostError
            Any transport or host-side failure (see
            :class:`AsyncAssetHostTransport`).
        AssetHostResponseError
            If the response carries no ``secure_url`` string.
        """
        result: dict[str, Any] = await self._transport.request(
            "POST",
            self.upload_path(),
            data={"upload_preset": self._target.upload_preset},
            files={"file": (image.name, image.data, image.content_type)},
        )
        url = result.get("secure_url") or result.get("url")
        if not isinstance(url, str) or not url:
            raise AssetHostResponseError(
                message=f"Upload response for {image.name!r} has no secure_url",
                context={"reason": "missing_secure_url", "keys": sorted(result)},
            )
        return url
