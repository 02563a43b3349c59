"""JSON file primitives shared by the file-backed stores."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from panel_relay.exceptions import PersistenceError, StoreDecodeError

_MISSING = object()


def read_json(path: Path, *, default: Any = _MISSING) -> Any:
    """Read and decode a JSON file.

    Args:
        path: File to read.
        default: Returned when the file does not exist.

    Raises:
        StoreDecodeError: Content is not valid UTF-8 JSON.
        PersistenceError: The file exists but cannot be read (or is missing and no default).
    """
    try:
        raw = path.read_bytes()
    except FileNotFoundError as e:
        if default is _MISSING:
            raise PersistenceError(f"File not found: {path}", path=str(path), cause=e) from e
        return default
    except OSError as e:
        raise PersistenceError(f"Cannot read {path}: {e}", path=str(path), cause=e) from e
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise StoreDecodeError(f"Invalid JSON in {path}: {e}", path=str(path), cause=e) from e


def write_json_atomic(path: Path, data: Any) -> None:
    """Write data as pretty JSON via a temp file in the same directory and os.replace.

    A crash mid-write leaves the previous file intact.

    Raises:
        PersistenceError: The file cannot be written.
    """
    fd = -1
    tmp_name = ""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            fd = -1
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
        tmp_name = ""
    except (OSError, TypeError, ValueError) as e:
        raise PersistenceError(f"Cannot write {path}: {e}", path=str(path), cause=e) from e
    finally:
        if fd != -1:
            os.close(fd)
        if tmp_name:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
