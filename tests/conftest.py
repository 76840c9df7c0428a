"""Shared test fixtures for the sceneshare test suite."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from sceneshare.config import SceneShareConfig
from sceneshare.errors import AssetHostRejectedError
from sceneshare.models import LocalImage

PNG_HEADER = b"\x89PNG\r\n\x1a\n"
JPEG_HEADER = b"\xff\xd8\xff\xe0"


class FakeAssetHost:
    """In-memory asset host with per-image delays and failures.

    Images are identified by ``LocalImage.name``.  Successful uploads
    return ``https://host/<name>``.
    """

    def __init__(
        self,
        delays: dict[str, float] | None = None,
        fail: set[str] | frozenset[str] = frozenset(),
        gate: asyncio.Event | None = None,
    ) -> None:
        self.delays = delays or {}
        self.fail = set(fail)
        self.gate = gate
        self.calls: list[str] = []
        self.completed: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def upload(self, image: LocalImage) -> str:
        self.calls.append(image.name)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            await asyncio.sleep(self.delays.get(image.name, 0))
            if image.name in self.fail:
                raise AssetHostRejectedError(
                    message=f"rejected {image.name}",
                    context={"status_code": 400},
                )
            self.completed.append(image.name)
            return f"https://host/{image.name}"
        finally:
            self.in_flight -= 1


def make_images(*names: str) -> list[LocalImage]:
    return [
        LocalImage(data=PNG_HEADER + name.encode(), index=i, name=name, content_type="image/png")
        for i, name in enumerate(names)
    ]


def make_config(**overrides: Any) -> SceneShareConfig:
    defaults: dict[str, Any] = dict(
        cloud_name="demo",
        upload_preset="unsigned_tree",
        share_base_url="https://tree.example.com/",
    )
    defaults.update(overrides)
    return SceneShareConfig(**defaults)


@pytest.fixture
def config() -> SceneShareConfig:
    """Default test configuration with a demo upload target."""
    return make_config()


@pytest.fixture
def host() -> FakeAssetHost:
    return FakeAssetHost()
