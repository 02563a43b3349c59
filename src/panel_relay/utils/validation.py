"""Validation and masking helpers for URLs and secrets."""

from __future__ import annotations

from typing import Any

from yarl import URL

HTTP_SCHEMES: frozenset[str] = frozenset({"http", "https"})


def is_http_url(url: Any) -> bool:
    """Return True if url is an absolute http(s) URL with a host."""
    if isinstance(url, str):
        try:
            url = URL(url)
        except ValueError:
            return False
    if not isinstance(url, URL):
        return False
    return url.scheme in HTTP_SCHEMES and bool(url.host)


def mask_secret(value: str | None) -> str:
    """Return a masked secret for logging (e.g. abcd...wxyz)."""
    if not value or len(value) < 12:
        return "***"
    return f"{value[:4]}...{value[-4:]}"
