"""Share-token encoding: ordered asset URLs to and from a URL-safe string.

Wire format, version 1
----------------------
1. Serialize the URL list as compact JSON
   (``json.dumps(urls, separators=(",", ":"), ensure_ascii=False)``).
2. Encode the JSON as UTF-8.
3. Base64-encode with the URL-safe alphabet (RFC 4648 §5:
   ``A-Z a-z 0-9 - _``) and strip the ``=`` padding.

The token therefore never needs escaping as a query value.  Decoding also
accepts padded tokens and the standard ``+`` / ``/`` alphabet, so links
built with a browser's ``btoa(JSON.stringify(urls))`` still open.

The link itself is ``<base>?<param>=<token>``.
"""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Sequence
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from sceneshare.errors import MalformedShareTokenError
from sceneshare.models import ShareLink

TOKEN_FORMAT_VERSION = 1
DEFAULT_SHARE_PARAM = "data"

# Query parsing turns "+" into " "; the standard alphabet is mapped onto
# the URL-safe one before decoding.
_TO_URLSAFE = str.maketrans({" ": "-", "+": "-", "/": "_"})


def encode_token(urls: Sequence[str]) -> str:
    """Encode an ordered list of URLs as a URL-safe token.

    Examples
    --------
    >>> encode_token(["https://host/a"])
    'WyJodHRwczovL2hvc3QvYSJd'
    """
    payload = json.dumps(list(urls), separators=(",", ":"), ensure_ascii=False)
    raw = base64.urlsafe_b64encode(payload.encode("utf-8"))
    return raw.rstrip(b"=").decode("ascii")


def decode_token(token: str) -> list[str]:
    """Decode a token produced by :func:`encode_token` back into its URL list.

    Raises
    ------
    MalformedShareTokenError
        If the token is not valid base64, not UTF-8 JSON, or the JSON is
        not a list of strings.
    """
    context = {"token": token[:64] + ("..." if len(token) > 64 else "")}
    normalized = token.strip().translate(_TO_URLSAFE).rstrip("=")
    if not normalized:
        raise MalformedShareTokenError(
            message="Share token is empty",
            context={**context, "reason": "empty"},
        )
    padded = normalized + "=" * (-len(normalized) % 4)

    try:
        raw = base64.b64decode(padded, altchars=b"-_", validate=True)
        urls = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError, RecursionError) as exc:
        raise MalformedShareTokenError(
            message="Share link is damaged and cannot be opened",
            context={**context, "reason": type(exc).__name__},
            cause=exc,
        ) from exc

    if not isinstance(urls, list) or not all(isinstance(url, str) for url in urls):
        raise MalformedShareTokenError(
            message="Share link does not contain a list of photo URLs",
            context={**context, "reason": "not_a_list_of_strings"},
        )
    return urls


def compose_link(base_url: str, token: str, param: str = DEFAULT_SHARE_PARAM) -> str:
    """Append ``param=token`` to *base_url*.

    Query parameters already on *base_url* are kept, except an existing
    *param*, which is replaced.  A ``#fragment`` (hash route) is kept.

    Examples
    --------
    >>> compose_link("https://tree.example/", "abc")
    'https://tree.example/?data=abc'
    """
    parts = urlsplit(base_url)
    query = [(key, value) for key, value in parse_qsl(parts.query, keep_blank_values=True) if key != param]
    query.append((param, token))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


def build_share_link(
    urls: Sequence[str],
    base_url: str,
    param: str = DEFAULT_SHARE_PARAM,
) -> ShareLink:
    """Encode *urls* and compose the full :class:`ShareLink`."""
    token = encode_token(urls)
    return ShareLink(
        url=compose_link(base_url, token, param),
        token=token,
        asset_urls=tuple(urls),
    )


def extract_token(link: str, param: str = DEFAULT_SHARE_PARAM) -> str | None:
    """Return the share token carried by *link*, or ``None`` if it has none."""
    for key, value in parse_qsl(urlsplit(link).query, keep_blank_values=True):
        if key == param:
            return value
    return None


def parse_share_link(link: str, param: str = DEFAULT_SHARE_PARAM) -> list[str] | None:
    """Decode the asset URLs from an opened link.

    Returns ``None`` when *link* is not a share link at all.

    Raises
    ------
    MalformedShareTokenError
        If the link carries a token that cannot be decoded.
    """
    token = extract_token(link, param)
    if token is None:
        return None
    return decode_token(token)
