"""Tests for share-token encoding, link composition, and decoding."""

from __future__ import annotations

import base64

import pytest

from sceneshare.errors import ErrorCode, MalformedShareTokenError
from sceneshare.share import (
    build_share_link,
    compose_link,
    decode_token,
    encode_token,
    extract_token,
    parse_share_link,
)

_URL_SAFE = set("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_")


class TestEncodeToken:
    def test_known_value(self):
        assert encode_token(["https://host/a"]) == "WyJodHRwczovL2hvc3QvYSJd"

    def test_two_urls(self):
        token = encode_token(["https://host/a", "https://host/b"])
        assert token == "WyJodHRwczovL2hvc3QvYSIsImh0dHBzOi8vaG9zdC9iIl0"

    def test_alphabet_is_url_safe_and_unpadded(self):
        urls = ["https://h/?q=>>>", "https://h/?q=???", "https://例え.jp/写真 1.png"]
        token = encode_token(urls)
        assert set(token) <= _URL_SAFE
        assert "=" not in token

    def test_deterministic(self):
        urls = ["https://host/x", "https://host/y"]
        assert encode_token(urls) == encode_token(list(urls))

    def test_order_matters(self):
        assert encode_token(["a", "b"]) != encode_token(["b", "a"])


class TestDecodeToken:
    @pytest.mark.parametrize(
        "urls",
        [
            ["https://host/a"],
            ["https://host/a", "https://host/b", "https://host/c"],
            ["https://host/a b?x=1&y=ü#frag", 'https://host/"quoted"\\path'],
            [],
        ],
    )
    def test_round_trip(self, urls):
        assert decode_token(encode_token(urls)) == urls

    def test_accepts_padding(self):
        assert decode_token("WyJodHRwczovL2hvc3QvYSJd") == ["https://host/a"]
        assert decode_token("W10=") == []

    def test_accepts_standard_alphabet_from_btoa(self):
        assert decode_token("WyJodHRwczovL2gvP3E9Pj4+Il0=") == ["https://h/?q=>>>"]
        assert decode_token("WyJodHRwczovL2gvP3E9Pz8/Il0=") == ["https://h/?q=???"]

    def test_plus_turned_into_space_is_restored(self):
        assert decode_token("WyJodHRwczovL2gvP3E9Pj4 Il0=") == ["https://h/?q=>>>"]

    @pytest.mark.parametrize(
        "token",
        [
            "",
            "   ",
            "!!!not-base64!!!",
            "e30",          # {}
            "WzEsMl0",      # [1,2]
            "bm90IGpzb24",  # not json
            "__4",          # invalid UTF-8
            "W",            # impossible length
            pytest.param(base64.urlsafe_b64encode(b"[" * 100_000).decode(), id="deep-nesting"),
        ],
    )
    def test_malformed_tokens_raise(self, token):
        with pytest.raises(MalformedShareTokenError) as exc_info:
            decode_token(token)
        err = exc_info.value
        assert err.code == ErrorCode.MALFORMED_SHARE_TOKEN
        assert "reason" in err.context

    def test_long_token_is_truncated_in_context(self):
        with pytest.raises(MalformedShareTokenError) as exc_info:
            decode_token("!" * 500)
        assert len(exc_info.value.context["token"]) < 100


class TestLinks:
    def test_compose_on_bare_origin(self):
        assert compose_link("https://tree.example/", "abc") == "https://tree.example/?data=abc"

    def test_compose_keeps_other_params(self):
        link = compose_link("https://tree.example/?lang=zh", "abc")
        assert link == "https://tree.example/?lang=zh&data=abc"

    def test_compose_replaces_existing_token(self):
        link = compose_link("https://tree.example/?data=old", "new")
        assert link == "https://tree.example/?data=new"

    def test_compose_keeps_hash_route(self):
        link = compose_link("https://tree.example/#/scene", "abc")
        assert link == "https://tree.example/?data=abc#/scene"
        assert extract_token(link) == "abc"

    def test_compose_custom_param(self):
        assert compose_link("https://t.example/", "abc", param="s") == "https://t.example/?s=abc"

    def test_build_share_link_end_to_end(self):
        urls = ["https://host/a", "https://host/b"]
        link = build_share_link(urls, "https://tree.example/")

        assert link.url == f"https://tree.example/?data={link.token}"
        assert link.asset_urls == tuple(urls)
        assert decode_token(link.token) == urls
        assert str(link) == link.url

    def test_extract_token_missing(self):
        assert extract_token("https://tree.example/") is None
        assert extract_token("https://tree.example/?other=1") is None

    def test_parse_share_link(self):
        urls = ["https://host/a?v=1&w=2", "https://host/b"]
        link = build_share_link(urls, "https://tree.example/?lang=en")
        assert parse_share_link(link.url) == urls

    def test_parse_non_share_link_returns_none(self):
        assert parse_share_link("https://tree.example/") is None

    def test_parse_damaged_link_raises(self):
        with pytest.raises(MalformedShareTokenError):
            parse_share_link("https://tree.example/?data=e30")
