# -*- coding: utf-8 -*-
"""Cookie jar file: {"cookies": [...]} in jar order."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from panel_relay.exceptions import StoreDecodeError
from panel_relay.models.cookie import Cookie
from panel_relay.persistence.repositories.interfaces.cookie_store import ICookieStore
from panel_relay.persistence.repositories.json_file._io import read_json, write_json_atomic


class JsonFileCookieStore(ICookieStore):
    """ICookieStore backed by a single pretty-printed JSON document."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[Cookie]:
        data: Any = read_json(self._path, default=None)
        if data is None:
            return []
        items = data.get("cookies") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise StoreDecodeError(
                f"Expected an object with a 'cookies' list in {self._path}",
                path=str(self._path),
            )
        try:
            return [Cookie.from_dict(item) for item in items]
        except (AttributeError, TypeError, ValueError) as e:
            raise StoreDecodeError(
                f"Invalid cookie entry in {self._path}: {e}",
                path=str(self._path),
                cause=e,
            ) from e

    def save(self, cookies: list[Cookie]) -> None:
        write_json_atomic(self._path, {"cookies": [c.to_dict() for c in cookies]})
