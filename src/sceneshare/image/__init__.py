"""Image ingestion: turning user selections into uploadable images.

Exports
-------
ingest_paths
    Read files concurrently into :class:`LocalImage` values.
ingest_data_uris
    Decode browser-style ``data:`` URIs.
build_local_images
    Validate and index ``(name, bytes)`` selections.
detect_mime / sniff_mime
    MIME detection from magic bytes with an extension fallback.
parse_data_uri
    Decode one ``data:`` URI.
validate_image
    Enforce the MIME allowlist and size cap.
"""

from .ingest import build_local_images, ingest_data_uris, ingest_paths
from .validate import (
    detect_mime,
    mime_to_extension,
    parse_data_uri,
    sniff_mime,
    validate_image,
)

__all__ = [
    "build_local_images",
    "detect_mime",
    "ingest_data_uris",
    "ingest_paths",
    "mime_to_extension",
    "parse_data_uri",
    "sniff_mime",
    "validate_image",
]
