"""Asset ingestion: selected files and payloads to :class:`LocalImage` values.

Ingestion completes as a single asynchronous join before the upload
orchestrator runs; every returned sequence is complete and ordered.

Selections that are not images at all (their type is not ``image/*``) are
skipped, the same way a browser file picker's ``accept="image/*"`` would
drop them.  Images of an unsupported subtype, oversized images, and
unreadable payloads raise :class:`ImageError` subclasses.  ``index`` is
assigned after filtering, so it always runs ``0..n-1``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from pathlib import Path

from sceneshare.config import SceneShareConfig
from sceneshare.errors import ImageNotFoundError
from sceneshare.models import LocalImage
from sceneshare.observability import get_logger

from .validate import detect_mime, mime_to_extension, parse_data_uri, validate_image

log = get_logger("ingest")


def build_local_images(
    selections: Iterable[tuple[str, bytes]],
    config: SceneShareConfig,
) -> list[LocalImage]:
    """Validate ``(name, data)`` pairs and wrap them in order.

    Parameters
    ----------
    selections:
        Raw selections in the order the user picked them.
    config:
        Supplies the MIME allowlist and size cap.

    Returns
    -------
    list[LocalImage]
        One image per accepted selection, indexed in selection order.
    """
    images: list[LocalImage] = []
    for name, data in selections:
        mime_type = detect_mime(name, data)
        if not mime_type.startswith("image/"):
            log.info(
                "Skipping non-image selection",
                extra={"extra_fields": {"op": "ingest", "name": name, "mime": mime_type}},
            )
            continue
        validate_image(name, mime_type, data, config)
        images.append(
            LocalImage(
                data=data,
                index=len(images),
                name=name,
                content_type=mime_type,
            )
        )
    return images


async def ingest_paths(
    paths: Iterable[str | Path],
    config: SceneShareConfig,
) -> list[LocalImage]:
    """Read image files concurrently and return them in selection order.

    Raises
    ------
    ImageNotFoundError
        If any path is not a regular file or cannot be read.
    """
    resolved = [Path(p).expanduser() for p in paths]
    for path in resolved:
        if not path.is_file():
            raise ImageNotFoundError(
                message=f"Image file not found: {path}",
                context={"src": str(path)},
            )

    # File reads run in the default executor to keep the event loop free.
    loop = asyncio.get_running_loop()
    try:
        contents = await asyncio.gather(
            *(loop.run_in_executor(None, path.read_bytes) for path in resolved)
        )
    except OSError as exc:
        raise ImageNotFoundError(
            message=f"Image file could not be read: {exc.filename or exc}",
            context={"src": str(exc.filename), "reason": type(exc).__name__},
            cause=exc,
        ) from exc
    return build_local_images(
        ((path.name, data) for path, data in zip(resolved, contents)),
        config,
    )


def ingest_data_uris(
    uris: Iterable[str],
    config: SceneShareConfig,
) -> list[LocalImage]:
    """Decode ``data:`` URIs (as produced by a browser ``FileReader``)."""
    selections: list[tuple[str, bytes]] = []
    for position, uri in enumerate(uris, start=1):
        declared_mime, data = parse_data_uri(uri)
        selections.append((f"photo-{position}{mime_to_extension(declared_mime)}", data))
    return build_local_images(selections, config)
