"""URL normalization for user-entered page addresses."""

from __future__ import annotations

import re
from urllib.parse import quote, urlsplit

from markup.errors import InvalidInput

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
# Code points a browser refuses in a domain host.
_FORBIDDEN_HOST_RE = re.compile(r"[\x00-\x20#/:<>?@\[\\\]^|\x7f]")
_IPV6_RE = re.compile(r"^[0-9A-Fa-f:.]+$")


def normalize_url(raw: str) -> str:
    """Trim, default the scheme to https and validate.

    The return value is the input as typed (plus scheme), never a
    re-serialized form, so normalizing twice is a no-op.
    """
    candidate = (raw or "").strip()
    if not candidate:
        raise InvalidInput("URL is empty")
    if not _SCHEME_RE.match(candidate):
        candidate = "https://" + candidate
    _validate_absolute(candidate)
    return candidate


def _validate_absolute(url: str) -> None:
    try:
        parts = urlsplit(url)
        parts.port  # raises on a non-numeric or out of range port
    except ValueError as exc:
        raise InvalidInput(f"Invalid URL: {url}") from exc

    host = parts.hostname
    if parts.scheme.lower() not in ("http", "https") or not host:
        raise InvalidInput(f"Invalid URL: {url}")
    if "[" in parts.netloc:
        if not _IPV6_RE.match(host):
            raise InvalidInput(f"Invalid URL: {url}")
    elif _FORBIDDEN_HOST_RE.search(host):
        raise InvalidInput(f"Invalid URL: {url}")


def origin_of(url: str) -> str:
    """``scheme://host[:port]`` of an absolute URL."""
    parts = urlsplit(url)
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    origin = f"{parts.scheme.lower()}://{host}"
    if parts.port is not None:
        origin += f":{parts.port}"
    return origin


def proxy_path(target_url: str, prefix: str = "/proxy") -> str:
    """Host-relative frame URL that loads ``target_url`` through the proxy."""
    return f"{prefix}?url={quote(target_url, safe='')}"
