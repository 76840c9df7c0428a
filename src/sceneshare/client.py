"""Asynchronous sceneshare client.

:class:`AsyncSceneShareClient` wires configuration, the asset-host
transport, the upload orchestrator, and the share pipeline together.

Usage::

    import asyncio
    from sceneshare import AsyncSceneShareClient

    async def main():
        async with AsyncSceneShareClient(
            cloud_name="my-cloud",
            upload_preset="unsigned_tree",
            share_base_url="https://tree.example.com/",
        ) as client:
            state = await client.share_files(["a.jpg", "b.png"])
            print(state.link or state.error_message)

    asyncio.run(main())
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

import httpx

from sceneshare.asset_host import AsyncAssetHostTransport, AsyncUploadAPI
from sceneshare.config import SceneShareConfig
from sceneshare.errors import ImageError
from sceneshare.image import ingest_data_uris, ingest_paths
from sceneshare.models import LocalImage, PipelineState
from sceneshare.observability import set_log_level
from sceneshare.pipeline import Clipboard, SharePipeline, StateListener
from sceneshare.share import parse_share_link
from sceneshare.upload import UploadOrchestrator


class AsyncSceneShareClient:
    """Asynchronous share-link client.

    Parameters
    ----------
    uploader:
        Optional replacement for the asset-host upload API (any object with
        ``async upload(image) -> str``).  Used to plug in a fake host.
    http_client:
        Optional pre-built :class:`httpx.AsyncClient` for the transport.
    **kwargs:
        All remaining keyword arguments are forwarded to
        :class:`SceneShareConfig`.
    """

    def __init__(
        self,
        *,
        uploader: Any | None = None,
        http_client: httpx.AsyncClient | None = None,
        **kwargs: Any,
    ) -> None:
        self._config = SceneShareConfig(**kwargs)
        set_log_level(self._config.log_level)
        self._transport = AsyncAssetHostTransport(self._config, client=http_client)
        self._uploads = uploader or AsyncUploadAPI(self._transport, self._config.target)
        self._orchestrator = UploadOrchestrator(self._uploads, self._config)
        self._pipeline = SharePipeline(self._orchestrator, self._config)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def config(self) -> SceneShareConfig:
        return self._config

    @property
    def state(self) -> PipelineState:
        return self._pipeline.state

    def subscribe(self, listener: StateListener):
        """Register a listener for pipeline snapshots.  See :meth:`SharePipeline.subscribe`."""
        return self._pipeline.subscribe(listener)

    # ------------------------------------------------------------------
    # Sharing
    # ------------------------------------------------------------------

    async def share(self, images: Sequence[LocalImage]) -> PipelineState:
        """Upload already-ingested images and build the share link."""
        return await self._pipeline.share(images)

    async def share_files(self, paths: Iterable[str | Path]) -> PipelineState:
        """Read image files, then share them.

        Ingestion problems (missing file, unsupported type, oversized image)
        end the attempt in ``FAILED`` like any other pipeline error.
        """
        try:
            images = await ingest_paths(paths, self._config)
        except ImageError as exc:
            return self._ingestion_failed(exc)
        return await self._pipeline.share(images)

    async def share_data_uris(self, uris: Iterable[str]) -> PipelineState:
        """Decode browser ``data:`` URIs, then share them."""
        try:
            images = ingest_data_uris(uris, self._config)
        except ImageError as exc:
            return self._ingestion_failed(exc)
        return await self._pipeline.share(images)

    def retry(self) -> PipelineState:
        """Reset a finished attempt so a fresh one can start."""
        return self._pipeline.retry()

    async def copy_link(self, clipboard: Clipboard) -> bool:
        """Copy the ready link.  See :meth:`SharePipeline.copy_link`."""
        return await self._pipeline.copy_link(clipboard)

    # ------------------------------------------------------------------
    # Viewing
    # ------------------------------------------------------------------

    def open_share_link(self, link: str) -> list[str] | None:
        """Return the photo URLs carried by an opened link.

        ``None`` means the link is not a share link (the visitor should get
        an empty scene to fill in).

        Raises
        ------
        MalformedShareTokenError
            If the link carries a damaged token.
        """
        return parse_share_link(link, self._config.share_param)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close the underlying HTTP transport."""
        await self._transport.close()

    async def __aenter__(self) -> AsyncSceneShareClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ingestion_failed(self, exc: ImageError) -> PipelineState:
        return self._pipeline.fail_before_upload(exc)
