"""Abstract interface for cookie jar storage (JSON file, etc.)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from panel_relay.models.cookie import Cookie


class ICookieStore(ABC):
    """Interface for persisting the ordered cookie list of a CookieJar."""

    @abstractmethod
    def load(self) -> list[Cookie]:
        """Return persisted cookies in jar order; empty list if nothing is stored.

        Raises:
            StoreDecodeError: If stored content exists but cannot be decoded.
            PersistenceError: If the storage cannot be read.
        """
        ...

    @abstractmethod
    def save(self, cookies: list[Cookie]) -> None:
        """Replace the stored cookie list.

        Raises:
            PersistenceError: If the storage cannot be written.
        """
        ...
