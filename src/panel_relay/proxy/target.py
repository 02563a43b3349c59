"""Inbound request target -> upstream URL."""

from __future__ import annotations

from yarl import URL

from panel_relay.exceptions import TargetResolutionError
from panel_relay.utils.validation import is_http_url


def resolve_target_url(raw_target: str, base_url: URL) -> URL:
    """Resolve the raw inbound request target to the URL to forward to.

    A target whose path (leading slashes stripped) contains "://" is an
    absolute passthrough, e.g. "/https://example.org/path" is forwarded to
    "https://example.org/path". Anything else is an absolute path on the
    origin of base_url, with leading slashes collapsed so the result always
    stays on the base host. Inner slashes are kept as received.
    The query string is kept in both cases.

    Args:
        raw_target: Encoded request target as received (path and query).
        base_url: Configured upstream base URL.

    Raises:
        TargetResolutionError: The absolute URL is malformed, has no host,
            or is not http(s).
    """
    stripped = raw_target.lstrip("/")
    path_part = stripped.split("?", 1)[0]

    if "://" in path_part:
        try:
            url = URL(stripped, encoded=True)
            valid = is_http_url(url)
        except ValueError as e:
            raise TargetResolutionError(f"Invalid URL: {e}", raw_target=raw_target) from e
        if not valid:
            raise TargetResolutionError(
                f"Invalid URL: {stripped!r} is not an absolute http(s) URL",
                raw_target=raw_target,
            )
        return url

    try:
        return URL(f"{base_url.origin()}/{stripped}", encoded=True)
    except ValueError as e:
        raise TargetResolutionError(f"URL join error: {e}", raw_target=raw_target) from e
