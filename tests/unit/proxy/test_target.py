# -*- coding: utf-8 -*-
"""Unit tests for inbound request target resolution."""

from __future__ import annotations

import pytest
from yarl import URL

from panel_relay.exceptions import TargetResolutionError
from panel_relay.proxy.target import resolve_target_url

BASE = URL("https://panel.example/")


@pytest.mark.parametrize(
    ("raw_target", "expected"),
    [
        ("/api/v1/me", "https://panel.example/api/v1/me"),
        ("/", "https://panel.example/"),
        ("", "https://panel.example/"),
        ("/login?next=%2Fhome", "https://panel.example/login?next=%2Fhome"),
        ("//evil.example/steal", "https://panel.example/evil.example/steal"),
        ("/files//raw/a.txt", "https://panel.example/files//raw/a.txt"),
        ("/search?u=https://other.example/", "https://panel.example/search?u=https://other.example/"),
    ],
)
def test_relative_targets_resolve_on_base(raw_target: str, expected: str) -> None:
    url = resolve_target_url(raw_target, BASE)

    assert str(url) == expected
    assert url.host == "panel.example"


@pytest.mark.parametrize(
    ("raw_target", "expected"),
    [
        ("/https://other.example/path", "https://other.example/path"),
        ("/http://other.example:8081/a/b?x=1&y=%20", "http://other.example:8081/a/b?x=1&y=%20"),
        ("https://panel.example/api", "https://panel.example/api"),
    ],
)
def test_absolute_targets_pass_through_verbatim(raw_target: str, expected: str) -> None:
    assert str(resolve_target_url(raw_target, BASE)) == expected


def test_relative_target_keeps_base_port() -> None:
    url = resolve_target_url("/x", URL("http://127.0.0.1:9000/"))

    assert str(url) == "http://127.0.0.1:9000/x"


@pytest.mark.parametrize(
    "raw_target",
    ["/http://", "/ftp://files.example/a", "/https:///nohost"],
)
def test_invalid_absolute_targets_raise(raw_target: str) -> None:
    with pytest.raises(TargetResolutionError) as exc_info:
        resolve_target_url(raw_target, BASE)

    assert str(exc_info.value).startswith("Invalid URL")
    assert exc_info.value.raw_target == raw_target
