"""Markup: frame-safe page proxy and webhook relay for page annotations."""

__version__ = "0.3.0"
