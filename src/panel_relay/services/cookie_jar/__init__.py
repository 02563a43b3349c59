"""Shared cookie jar for the gated upstream."""

from panel_relay.services.cookie_jar.cookie_jar import CookieJar

__all__ = ["CookieJar"]
