"""Share links: encoding ordered asset URLs into a self-contained link."""

from .token import (
    DEFAULT_SHARE_PARAM,
    TOKEN_FORMAT_VERSION,
    build_share_link,
    compose_link,
    decode_token,
    encode_token,
    extract_token,
    parse_share_link,
)

__all__ = [
    "DEFAULT_SHARE_PARAM",
    "TOKEN_FORMAT_VERSION",
    "build_share_link",
    "compose_link",
    "decode_token",
    "encode_token",
    "extract_token",
    "parse_share_link",
]
