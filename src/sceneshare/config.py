"""SDK configuration for sceneshare.

:class:`SceneShareConfig` is a dataclass that captures every tuneable knob
exposed by the SDK.  Instances are passed to :class:`AsyncSceneShareClient`
and to the individual pipeline components.

The upload target (cloud name plus unsigned upload preset) is an explicit
configuration value rather than a module constant, so tests can point the
pipeline at a fake asset host.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Literal
from urllib.parse import urlparse

# ---------------------------------------------------------------------------
# MIME allowlist constants
# ---------------------------------------------------------------------------

DEFAULT_IMAGE_MIMES: list[str] = [
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/bmp",
    "image/svg+xml",
]
"""MIME types accepted by the ingestion step."""

_LOCAL_HOSTS = ("localhost", "127.0.0.1", "::1")


@dataclass(frozen=True)
class UploadTarget:
    """Destination identity sent with every upload request.

    Attributes
    ----------
    cloud_name:
        Account name on the asset host; part of the upload path.
    upload_preset:
        Name of the unsigned upload preset configured on the asset host.
    """

    cloud_name: str
    upload_preset: str


# ---------------------------------------------------------------------------
# Configuration dataclass
# ---------------------------------------------------------------------------

@dataclass
class SceneShareConfig:
    """Complete configuration for a sceneshare client.

    Parameters
    ----------
    cloud_name:
        Asset-host account name.  **Required.**
    upload_preset:
        Unsigned upload preset.  **Required.**  Masked in ``repr``.
    asset_host_url:
        API root of the asset host.  Override for proxies or testing.
    share_base_url:
        Base page address that share links are composed onto.
    share_param:
        Query-parameter key carrying the share token.
    upload_max_concurrent:
        Upper bound on simultaneous uploads.  ``None`` puts every upload
        in flight at once.
    upload_failure_policy:
        How a failed upload ends the batch.

        * ``"first"`` -- stop at the first observed failure and cancel the
          remaining uploads.
        * ``"all"`` -- wait for every upload, then report the failure with
          the lowest position.
    image_allowed_mimes:
        MIME types accepted at ingestion.
    image_max_size_bytes:
        Maximum size of a single image.  Default is 10 MiB.
    timeout_seconds:
        HTTP request timeout in seconds.  A timeout counts as an ordinary
        upload failure.
    http_proxy:
        Optional HTTP/HTTPS proxy URL.
    metrics:
        Optional :class:`~sceneshare.observability.MetricsHook` backend.
    log_level:
        Minimum level for every ``sceneshare.*`` logger, applied when a
        client is built.
    debug_dump_payload:
        Write a redacted record of each asset-host exchange to *stderr*.
    """

    # ── Asset host ──────────────────────────────────────────────────────
    cloud_name: str = ""

    upload_preset: str = ""

    asset_host_url: str = "https://api.cloudinary.com/v1_1"

    # ── Share links ─────────────────────────────────────────────────────
    share_base_url: str = "http://localhost:3000/"

    share_param: str = "data"

    # ── Uploads ─────────────────────────────────────────────────────────
    upload_max_concurrent: int | None = None

    upload_failure_policy: Literal["first", "all"] = "first"

    # ── Images ──────────────────────────────────────────────────────────
    image_allowed_mimes: list[str] = field(
        default_factory=lambda: list(DEFAULT_IMAGE_MIMES),
    )

    image_max_size_bytes: int = 10 * 1024 * 1024  # 10 MiB

    # ── HTTP ────────────────────────────────────────────────────────────
    timeout_seconds: float = 30.0

    http_proxy: str | None = None

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    log_level: int | str = "INFO"

    # ── Debug ───────────────────────────────────────────────────────────
    debug_dump_payload: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        for name in ("cloud_name", "upload_preset"):
            if not getattr(self, name).strip():
                raise ValueError(f"{name} is required and must be non-empty")

        parsed = urlparse(self.asset_host_url)
        if parsed.scheme not in ("http", "https"):
            raise ValueError(
                f"asset_host_url must be an http(s) URL, got {self.asset_host_url!r}"
            )
        if parsed.scheme == "http" and parsed.hostname not in _LOCAL_HOSTS:
            raise ValueError(
                f"asset_host_url uses insecure HTTP for non-local host '{parsed.hostname}'. "
                "Use HTTPS, or target localhost for testing."
            )

        share = urlparse(self.share_base_url)
        if share.scheme not in ("http", "https") or not share.netloc:
            raise ValueError(
                f"share_base_url must be an absolute http(s) URL, got {self.share_base_url!r}"
            )
        if not self.share_param:
            raise ValueError("share_param must be a non-empty string")

        if self.upload_max_concurrent is not None and self.upload_max_concurrent < 1:
            raise ValueError(
                f"upload_max_concurrent must be >= 1 or None, got {self.upload_max_concurrent}"
            )
        if self.upload_failure_policy not in ("first", "all"):
            raise ValueError(
                f"upload_failure_policy must be 'first' or 'all', got {self.upload_failure_policy!r}"
            )
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")
        if self.image_max_size_bytes <= 0:
            raise ValueError(f"image_max_size_bytes must be > 0, got {self.image_max_size_bytes}")

    @property
    def target(self) -> UploadTarget:
        """The upload destination derived from ``cloud_name`` and ``upload_preset``."""
        return UploadTarget(cloud_name=self.cloud_name, upload_preset=self.upload_preset)

    def __repr__(self) -> str:
        """Mask the upload preset so it does not end up in logs."""
        parts: list[str] = []
        for f in dataclasses.fields(self):
            val = getattr(self, f.name)
            if f.name == "upload_preset":
                masked = f"...{val[-4:]}" if len(val) >= 4 else "****"
                parts.append(f"upload_preset='{masked}'")
            else:
                parts.append(f"{f.name}={val!r}")
        return f"SceneShareConfig({', '.join(parts)})"
