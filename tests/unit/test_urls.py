"""Tests for URL normalization."""

from __future__ import annotations

from urllib.parse import urlsplit

import pytest

from markup.errors import InvalidInput
from markup.proxy.urls import normalize_url, origin_of, proxy_path


@pytest.mark.parametrize("raw", [
    "example.com",
    "www.example.com/path?q=1#frag",
    "localhost:8080",
    "sub.domain.example.co.uk/a/b",
    "münchen.de",
])
def test_scheme_less_input_gets_https(raw: str) -> None:
    result = normalize_url(raw)
    assert result == "https://" + raw
    parts = urlsplit(result)
    assert parts.scheme == "https"
    assert parts.hostname


@pytest.mark.parametrize("raw", ["http://example.com", "https://example.com/x"])
def test_existing_scheme_kept(raw: str) -> None:
    assert normalize_url(raw) == raw


def test_uppercase_scheme_not_doubled() -> None:
    assert normalize_url("HTTPS://Example.com") == "HTTPS://Example.com"


def test_whitespace_trimmed() -> None:
    assert normalize_url("  example.com \n") == "https://example.com"


@pytest.mark.parametrize("raw", ["", "   ", "\t\n"])
def test_empty_input_rejected(raw: str) -> None:
    with pytest.raises(InvalidInput):
        normalize_url(raw)


@pytest.mark.parametrize("raw", [
    "https://",
    "http://exa mple.com",
    "https://example.com:notaport",
    "https://example.com:99999",
    "https://[::zz]/",
    "https://exa<mple.com",
])
def test_malformed_input_rejected(raw: str) -> None:
    with pytest.raises(InvalidInput):
        normalize_url(raw)


@pytest.mark.parametrize("raw", [
    "example.com",
    "  http://example.com/a b  ",
    "https://[2001:db8::1]:8443/",
    "EXAMPLE.com/Path",
])
def test_normalize_is_idempotent(raw: str) -> None:
    once = normalize_url(raw)
    assert normalize_url(once) == once


def test_origin_of() -> None:
    assert origin_of("https://Example.com/a/b?c=1") == "https://example.com"
    assert origin_of("http://example.com:8080/") == "http://example.com:8080"
    assert origin_of("https://[2001:db8::1]:8443/x") == "https://[2001:db8::1]:8443"


def test_proxy_path_encodes_target() -> None:
    assert proxy_path("https://example.com/a?b=1&c=2") == (
        "/proxy?url=https%3A%2F%2Fexample.com%2Fa%3Fb%3D1%26c%3D2"
    )
