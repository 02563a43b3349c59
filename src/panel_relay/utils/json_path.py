"""Best-effort lookups in decoded JSON.

Every helper returns None when a key is missing or a value has the wrong
JSON type; none of them raise.
"""

from __future__ import annotations

import math
from typing import Any


def dig(data: Any, *path: str) -> Any:
    """Follow object keys in order; None as soon as a step is missing."""
    current = data
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current


def as_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def as_float(value: Any) -> float | None:
    """JSON number as a finite float.

    Booleans, numeric strings, NaN, infinities and integers beyond float range
    are rejected.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def as_uint(value: Any) -> int | None:
    """Non-negative JSON integer."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


def extract_id(value: Any) -> str | None:
    """Return a record identifier as a string.

    Accepts a JSON string or integer (integers are stringified). Anything else,
    including booleans and floats, yields None.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return None
