"""Tests for AsyncSceneShareClient.

All asset-host calls are served by a fake uploader or an
``httpx.MockTransport`` so these tests run entirely offline.
"""

from __future__ import annotations

import base64
import re
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from conftest import JPEG_HEADER, PNG_HEADER, FakeAssetHost, make_images

from sceneshare import AsyncSceneShareClient
from sceneshare.errors import (
    ImageNotFoundError,
    ImageTypeError,
    MalformedShareTokenError,
    UploadFailedError,
)
from sceneshare.models import PipelineStatus

CLIENT_KWARGS = dict(
    cloud_name="demo",
    upload_preset="unsigned_tree",
    share_base_url="https://tree.example.com/",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _cloud_handler(seen: list[httpx.Request]):
    """Fake asset host that echoes the uploaded filename into the URL."""

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        filename = re.search(rb'filename="([^"]+)"', request.content).group(1).decode()
        return httpx.Response(
            200, json={"secure_url": f"https://res.example/demo/{filename}"},
        )

    return handler


def _http_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url="https://api.cloudinary.com/v1_1",
        transport=httpx.MockTransport(handler),
    )


# ===========================================================================
# Construction
# ===========================================================================


class TestInit:
    def test_config_built_from_kwargs(self):
        client = AsyncSceneShareClient(**CLIENT_KWARGS, upload_max_concurrent=2)
        assert client.config.cloud_name == "demo"
        assert client.config.upload_max_concurrent == 2
        assert client.state.status is PipelineStatus.IDLE

    def test_invalid_config_raises(self):
        with pytest.raises(ValueError):
            AsyncSceneShareClient(**CLIENT_KWARGS, share_param="")

    async def test_close_closes_http_client(self):
        http_client = MagicMock()
        http_client.aclose = AsyncMock()
        async with AsyncSceneShareClient(**CLIENT_KWARGS, http_client=http_client):
            pass
        http_client.aclose.assert_awaited_once()


# ===========================================================================
# Sharing through a fake uploader
# ===========================================================================


class TestShareWithFakeUploader:
    async def test_share_images(self):
        host = FakeAssetHost(delays={"a": 0.01})
        async with AsyncSceneShareClient(**CLIENT_KWARGS, uploader=host) as client:
            state = await client.share(make_images("a", "b"))

            assert state.status is PipelineStatus.READY
            assert client.open_share_link(state.link.url) == [
                "https://host/a",
                "https://host/b",
            ]

    async def test_failure_then_retry(self):
        host = FakeAssetHost(fail={"b"})
        async with AsyncSceneShareClient(**CLIENT_KWARGS, uploader=host) as client:
            failed = await client.share(make_images("a", "b"))
            assert isinstance(failed.error, UploadFailedError)

            client.retry()
            host.fail.clear()
            assert (await client.share(make_images("a", "b"))).status is PipelineStatus.READY

    async def test_subscribe_and_copy_link(self):
        snapshots = []
        clipboard = MagicMock()
        async with AsyncSceneShareClient(**CLIENT_KWARGS, uploader=FakeAssetHost()) as client:
            client.subscribe(snapshots.append)
            state = await client.share(make_images("a"))
            assert await client.copy_link(clipboard) is True

        clipboard.assert_called_once_with(state.link.url)
        assert snapshots[-1] is state


# ===========================================================================
# Ingestion entry points
# ===========================================================================


class TestShareFiles:
    async def test_share_files_in_selection_order(self, tmp_path):
        (tmp_path / "star.png").write_bytes(PNG_HEADER + b"star")
        (tmp_path / "bauble.jpg").write_bytes(JPEG_HEADER + b"bauble")
        host = FakeAssetHost(delays={"star.png": 0.02})

        async with AsyncSceneShareClient(**CLIENT_KWARGS, uploader=host) as client:
            state = await client.share_files([tmp_path / "star.png", tmp_path / "bauble.jpg"])

        assert state.status is PipelineStatus.READY
        assert list(state.link.asset_urls) == [
            "https://host/star.png",
            "https://host/bauble.jpg",
        ]

    async def test_missing_file_fails_attempt(self, tmp_path):
        host = FakeAssetHost()
        async with AsyncSceneShareClient(**CLIENT_KWARGS, uploader=host) as client:
            state = await client.share_files([tmp_path / "gone.png"])

        assert state.status is PipelineStatus.FAILED
        assert isinstance(state.error, ImageNotFoundError)
        assert host.calls == []

    async def test_unreadable_file_fails_attempt(self, tmp_path, monkeypatch):
        path = tmp_path / "locked.png"
        path.write_bytes(PNG_HEADER)

        def _denied(self):
            raise PermissionError(13, "Permission denied", str(self))

        monkeypatch.setattr(Path, "read_bytes", _denied)
        host = FakeAssetHost()
        async with AsyncSceneShareClient(**CLIENT_KWARGS, uploader=host) as client:
            state = await client.share_files([path])

        assert state.status is PipelineStatus.FAILED
        assert isinstance(state.error, ImageNotFoundError)
        assert host.calls == []

    async def test_only_non_images_is_empty_batch(self, tmp_path):
        (tmp_path / "notes.txt").write_text("hello")
        async with AsyncSceneShareClient(**CLIENT_KWARGS, uploader=FakeAssetHost()) as client:
            state = await client.share_files([tmp_path / "notes.txt"])

        assert state.status is PipelineStatus.FAILED
        assert state.error_message == "Select at least one photo before sharing"

    async def test_share_data_uris(self):
        uris = [
            "data:image/png;base64," + base64.b64encode(PNG_HEADER + b"1").decode(),
            "data:image/jpeg;base64," + base64.b64encode(JPEG_HEADER + b"2").decode(),
        ]
        async with AsyncSceneShareClient(**CLIENT_KWARGS, uploader=FakeAssetHost()) as client:
            state = await client.share_data_uris(uris)

        assert list(state.link.asset_urls) == [
            "https://host/photo-1.png",
            "https://host/photo-2.jpg",
        ]

    async def test_unsupported_data_uri_fails_attempt(self):
        uri = "data:image/tiff;base64," + base64.b64encode(b"II*\x00").decode()
        async with AsyncSceneShareClient(**CLIENT_KWARGS, uploader=FakeAssetHost()) as client:
            state = await client.share_data_uris([uri])

        assert isinstance(state.error, ImageTypeError)


# ===========================================================================
# Full stack over HTTP
# ===========================================================================


class TestFullStack:
    async def test_share_over_mock_http(self, tmp_path):
        for name in ("one.png", "two.png", "three.png"):
            (tmp_path / name).write_bytes(PNG_HEADER + name.encode())
        seen: list[httpx.Request] = []

        async with AsyncSceneShareClient(
            **CLIENT_KWARGS, http_client=_http_client(_cloud_handler(seen)),
        ) as client:
            state = await client.share_files(
                [tmp_path / "one.png", tmp_path / "two.png", tmp_path / "three.png"]
            )
            urls = client.open_share_link(state.link.url)

        assert state.status is PipelineStatus.READY
        assert urls == [
            "https://res.example/demo/one.png",
            "https://res.example/demo/two.png",
            "https://res.example/demo/three.png",
        ]
        assert len(seen) == 3
        assert {r.url.path for r in seen} == {"/v1_1/demo/image/upload"}

    async def test_host_rejection_names_the_photo(self, tmp_path):
        (tmp_path / "ok.png").write_bytes(PNG_HEADER + b"ok")
        (tmp_path / "bad.png").write_bytes(PNG_HEADER + b"bad")

        def handler(request: httpx.Request) -> httpx.Response:
            if b'filename="bad.png"' in request.content:
                return httpx.Response(400, json={"error": {"message": "Invalid image file"}})
            return httpx.Response(200, json={"secure_url": "https://res.example/ok.png"})

        async with AsyncSceneShareClient(**CLIENT_KWARGS, http_client=_http_client(handler)) as client:
            state = await client.share_files([tmp_path / "ok.png", tmp_path / "bad.png"])

        assert state.status is PipelineStatus.FAILED
        assert state.error.index == 2
        assert "Invalid image file" in state.error.context["reason"]
        assert state.error.context["name"] == "bad.png"


# ===========================================================================
# Opening links
# ===========================================================================


class TestOpenShareLink:
    def test_plain_page_is_not_a_share_link(self):
        client = AsyncSceneShareClient(**CLIENT_KWARGS)
        assert client.open_share_link("https://tree.example.com/") is None

    def test_damaged_link_raises(self):
        client = AsyncSceneShareClient(**CLIENT_KWARGS)
        with pytest.raises(MalformedShareTokenError):
            client.open_share_link("https://tree.example.com/?data=%%%")

    def test_custom_param(self):
        client = AsyncSceneShareClient(**CLIENT_KWARGS, share_param="s")
        assert client.open_share_link("https://tree.example.com/?s=W10") == []
