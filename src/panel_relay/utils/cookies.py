"""Set-Cookie parsing and cookie seeding helpers."""

from __future__ import annotations

from collections.abc import Iterable

from panel_relay.models.cookie import Cookie


def parse_set_cookie(header_value: str, domain: str) -> Cookie:
    """Build a Cookie from one raw Set-Cookie header value.

    Only the leading name=value pair is parsed. http_only and secure are
    case-insensitive substring checks of the whole header; path is always "/".
    Max-Age, Expires, SameSite, Path and Domain attributes are not parsed.

    Args:
        header_value: Raw header value, e.g. "sid=abc; Path=/; HttpOnly".
        domain: Host the response came from.
    """
    pair = header_value.split(";", 1)[0]
    name, _, value = pair.partition("=")
    lowered = header_value.lower()
    return Cookie(
        name=name.strip(),
        value=value.strip(),
        domain=domain,
        path="/",
        http_only="httponly" in lowered,
        secure="secure" in lowered,
    )


def document_cookie_script(cookies: Iterable[Cookie]) -> str:
    """Return a JS snippet that seeds document.cookie with the given cookies.

    Used by display surfaces as an initialization script, one assignment per line.
    """
    lines = []
    for cookie in cookies:
        literal = f"{cookie.name}={cookie.value}; path={cookie.path}"
        escaped = literal.replace("\\", "\\\\").replace("'", "\\'")
        lines.append(f"document.cookie = '{escaped}';")
    return "\n".join(lines)
