"""Error taxonomy shared by the proxy and the webhook relay."""

from __future__ import annotations


class MarkupError(Exception):
    """Base class for errors raised by this package."""


class InvalidInput(MarkupError):
    """Missing or malformed request parameter. Surfaced as 400."""


class UpstreamFetchError(MarkupError):
    """The target page could not be reached (DNS, TLS, timeout, refused)."""


class UpstreamHttpError(MarkupError):
    """The target page answered with a non-2xx status."""

    def __init__(self, status_code: int, status_text: str = "") -> None:
        self.status_code = status_code
        self.status_text = status_text
        super().__init__(f"Upstream returned {status_code} {status_text}".rstrip())


class WebhookDeliveryError(MarkupError):
    """The webhook destination could not be reached."""


class ConfigurationError(MarkupError):
    """Required configuration is missing or invalid.

    The message is for server logs only; clients get a generic 500.
    """
