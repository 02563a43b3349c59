# -*- coding: utf-8 -*-
"""Tests for the structlog processors added by configure_logging."""

from __future__ import annotations

from panel_relay.logging.config import _mask_sensitive_fields


def test_cookie_header_is_masked() -> None:
    event = _mask_sensitive_fields(
        None,
        "debug",
        {
            "event": "panel_api_request",
            "cookie_header": "sid=0123456789abcdef; lang=ru",
            "http_url": "https://panel.example/api",
        },
    )

    assert event["cookie_header"] == "sid=...g=ru"
    assert event["http_url"] == "https://panel.example/api"


def test_short_or_missing_cookie_header_is_fully_masked() -> None:
    assert _mask_sensitive_fields(None, "info", {"event": "x", "cookie_header": "a=1"})["cookie_header"] == "***"
    assert _mask_sensitive_fields(None, "info", {"event": "x", "cookie_header": None})["cookie_header"] == "***"


def test_events_without_cookies_are_untouched() -> None:
    event = {"event": "x", "poll_page": 2}

    assert _mask_sensitive_fields(None, "info", dict(event)) == event
