"""Outbound page fetcher with a desktop-browser header profile."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

import httpx

from markup.config import DEFAULT_FETCH_TIMEOUT
from markup.errors import UpstreamFetchError, UpstreamHttpError
from markup.proxy.urls import origin_of

logger = logging.getLogger(__name__)

# Sites behind bot protection (Cloudflare and friends) are less likely to
# challenge a request that looks like a first navigation from desktop Chrome.
# This lowers the block rate; it does not guarantee a page.
BROWSER_HEADERS: dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
    ),
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,"
        "image/webp,image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7"
    ),
    "Accept-Language": "en-US,en;q=0.9,it-IT;q=0.8,it;q=0.7",
    # Uncompressed bodies are rewritten as plain text.
    "Accept-Encoding": "identity",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "Sec-Ch-Ua": '"Google Chrome";v="131", "Chromium";v="131", "Not_A Brand";v="24"',
    "Sec-Ch-Ua-Mobile": "?0",
    "Sec-Ch-Ua-Platform": '"macOS"',
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
    "Upgrade-Insecure-Requests": "1",
    "DNT": "1",
}


@dataclass
class UpstreamResponse:
    """Final response from the target page, after redirects."""

    status_code: int
    status_text: str
    body: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def raise_for_status(self) -> None:
        if not self.ok:
            raise UpstreamHttpError(self.status_code, self.status_text)


def browser_headers(target_url: str) -> dict[str, str]:
    headers = dict(BROWSER_HEADERS)
    headers["Referer"] = origin_of(target_url) + "/"
    return headers


class UpstreamFetcher:
    """Fetches a target page once per call. No cache, no retry."""

    def __init__(
        self,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    async def fetch(self, target_url: str) -> UpstreamResponse:
        """GET ``target_url`` and report whatever status it ends on.

        Raises UpstreamFetchError when no response arrives at all.
        """
        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                follow_redirects=True,
                timeout=self._timeout,
            ) as client:
                resp = await client.get(target_url, headers=browser_headers(target_url))
        except httpx.TimeoutException as exc:
            logger.warning("Timed out fetching %s: %s", target_url, exc)
            raise UpstreamFetchError(
                f"Timed out after {self._timeout:g}s waiting for {target_url}",
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Failed to fetch %s: %s", target_url, exc)
            raise UpstreamFetchError(str(exc) or type(exc).__name__) from exc

        return UpstreamResponse(
            status_code=resp.status_code,
            status_text=resp.reason_phrase,
            body=resp.text,
            url=str(resp.url),
            headers=dict(resp.headers),
        )
