"""Cookie: one named session cookie captured from the upstream panel.

Identity inside a CookieJar is the name alone; the jar is scoped to a single
upstream, so domain and path are informational.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Optional


@dataclass(frozen=True, slots=True)
class Cookie:
    """A captured cookie as persisted in the cookie jar file."""

    name: str
    value: str
    domain: str = ""
    path: str = "/"
    expiration_date: Optional[float] = None
    """Unix timestamp; None for session cookies or when not parsed."""
    host_only: Optional[bool] = None
    http_only: Optional[bool] = None
    same_site: Optional[str] = None
    secure: Optional[bool] = None
    session: Optional[bool] = None
    store_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Cookie:
        """Build from a persisted dict; unknown keys are ignored.

        Raises:
            ValueError: If name or value is missing or not a string.
        """
        name = data.get("name")
        value = data.get("value")
        if not isinstance(name, str) or not isinstance(value, str):
            raise ValueError("cookie name and value must be strings")
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @property
    def pair(self) -> str:
        """name=value as sent in a Cookie request header."""
        return f"{self.name}={self.value}"
