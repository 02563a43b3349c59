# -*- coding: utf-8 -*-
"""Shared pytest fixtures for unit and integration tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from panel_relay.config import Settings
from panel_relay.persistence.repositories.json_file import (
    JsonFileCookieStore,
    JsonFileTransactionStore,
)
from panel_relay.services.cookie_jar import CookieJar


@pytest.fixture
def base_url() -> str:
    """Default upstream base URL used by tests."""
    return "https://panel.example/"


@pytest.fixture
def settings_factory(tmp_path: Path, base_url: str) -> Callable[..., Settings]:
    """Build Settings pointing storage at tmp_path, with per-section overrides.

    Usage: settings_factory(proxy={"port": 0}, polling={"max_pages": 3})
    """

    def _build(**overrides: Any) -> Settings:
        sections: dict[str, dict[str, Any]] = {
            "logging": {"log_to_console": False},
            "proxy": {"host": "127.0.0.1", "port": 0, "upstream_base_url": base_url},
            "polling": {"poll_seconds": 0.5},
            "storage": {
                "cookie_jar_path": str(tmp_path / "cookies.json"),
                "ledger_path": str(tmp_path / "ledger.json"),
            },
        }
        for section, values in overrides.items():
            sections.setdefault(section, {}).update(values)
        return Settings(**sections)

    return _build


@pytest.fixture
def settings(settings_factory: Callable[..., Settings]) -> Settings:
    return settings_factory()


@pytest.fixture
def cookie_store(tmp_path: Path) -> JsonFileCookieStore:
    """Cookie jar file store in a per-test directory."""
    return JsonFileCookieStore(tmp_path / "cookies.json")


@pytest.fixture
def transaction_store(tmp_path: Path) -> JsonFileTransactionStore:
    """Ledger file store in a per-test directory."""
    return JsonFileTransactionStore(tmp_path / "ledger.json")


@pytest.fixture
def cookie_jar(cookie_store: JsonFileCookieStore, base_url: str) -> CookieJar:
    """Fresh empty jar persisted to cookie_store."""
    return CookieJar(cookie_store, base_url)


@pytest.fixture
def payout_factory() -> Callable[..., dict[str, Any]]:
    """Build a raw payouts item as returned by the panel API, with easy overrides."""

    def _build(id: Any = "1001", **overrides: Any) -> dict[str, Any]:
        item: dict[str, Any] = {
            "id": id,
            "userId": "user-7",
            "payment_method_id": "pm-3",
            "wallet": "4276********1234",
            "amount": {"trader": {"643": 1500.5, "000001": 16.2}},
            "total": {"trader": {"643": 1530, "000001": 16.5}},
            "status": "pending",
            "bank": {"name": "sberbank", "code": "100000000111", "label": "Sber"},
            "method": {"label": "Card"},
            "meta": {"courses": {"trader": 92.6}},
            "tooltip": {"payments": {"success": 12, "percent": 97.5}},
            "approved_at": None,
            "expired_at": "2026-10-18T12:30:00Z",
            "created_at": "2026-10-18T12:00:00Z",
            "updated_at": "2026-10-18T12:01:00Z",
            "trader": {"id": "trader-9", "name": "Ivan"},
            "attachments": [{"file": "receipt.pdf"}],
        }
        item.update(overrides)
        return item

    return _build
