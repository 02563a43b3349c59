"""CookieJar: name-keyed session cookies shared by the proxy and the poller.

Written only by proxied responses (merge) and by an explicit external reset
(clear). Read by every request sent to the gated domain. All access goes
through one threading lock; no reader sees a jar mid-merge, including
readers on other threads.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Sequence
from typing import Any, Optional

import structlog
from yarl import URL

from panel_relay.exceptions import PersistenceError
from panel_relay.models.cookie import Cookie
from panel_relay.persistence.repositories.interfaces.cookie_store import ICookieStore
from panel_relay.utils.cookies import parse_set_cookie


class CookieJar:
    """Ordered name -> Cookie mapping plus the upstream base_url.

    Invariant: at most one cookie per name. Merging a known name replaces the
    entry in place (its position is kept); new names are appended.
    """

    def __init__(
        self,
        store: ICookieStore,
        base_url: str,
        *,
        cookies: Iterable[Cookie] = (),
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the jar.

        Args:
            store: Where the jar is persisted after every merge.
            base_url: Upstream base URL relative proxy paths are resolved against.
            cookies: Initial content (later duplicates of a name win).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._store = store
        self._base_url = URL(base_url)
        self._lock = threading.RLock()
        self._cookies: dict[str, Cookie] = {}
        for cookie in cookies:
            self._cookies[cookie.name] = cookie
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @classmethod
    def load(
        cls,
        store: ICookieStore,
        base_url: str,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
    ) -> CookieJar:
        """Build a jar from the persisted file; empty on absence or any read/decode failure."""
        logger = get_logger(cls.__name__)
        try:
            cookies = store.load()
        except PersistenceError as e:
            logger.warning(
                "cookie_jar_load_failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            cookies = []
        logger.info("cookie_jar_loaded", cookie_count=len(cookies))
        return cls(store, base_url, cookies=cookies, get_logger=get_logger)

    @property
    def base_url(self) -> URL:
        return self._base_url

    def __len__(self) -> int:
        with self._lock:
            return len(self._cookies)

    def cookies(self) -> list[Cookie]:
        """Snapshot of the jar in order (read accessor for display surfaces)."""
        with self._lock:
            return list(self._cookies.values())

    def get(self, name: str) -> Optional[Cookie]:
        with self._lock:
            return self._cookies.get(name)

    def cookie_header(self) -> str:
        """Return "name=value" pairs joined by "; "; empty string for an empty jar."""
        with self._lock:
            return "; ".join(c.pair for c in self._cookies.values())

    def merge(self, new_cookies: Sequence[Cookie]) -> None:
        """Replace-or-append each cookie by name, then persist.

        Empty input is a no-op (no disk write). A persistence failure is logged;
        the in-memory jar stays authoritative.
        """
        if not new_cookies:
            self._logger.debug("cookie_jar_merge_empty")
            return
        with self._lock:
            for cookie in new_cookies:
                self._cookies[cookie.name] = cookie
            snapshot = list(self._cookies.values())
            self._persist(snapshot)
        self._logger.debug(
            "cookie_jar_merged",
            merged_names=[c.name for c in new_cookies],
            cookie_count=len(snapshot),
        )

    def merge_set_cookie_headers(self, header_values: Iterable[str], domain: str) -> None:
        """Parse raw Set-Cookie header values and merge them as one batch.

        Values that are not plain ASCII, including undecodable bytes surfaced
        as surrogate escapes, are logged and skipped.
        """
        batch: list[Cookie] = []
        for value in header_values:
            if not value.isascii():
                self._logger.warning(
                    "cookie_jar_header_skipped",
                    cookie_domain=domain,
                    cookie_header_length=len(value),
                )
                continue
            batch.append(parse_set_cookie(value, domain))
        self.merge(batch)

    def clear(self) -> None:
        """Drop every cookie and persist the empty jar (external reset action)."""
        with self._lock:
            self._cookies.clear()
            self._persist([])
        self._logger.info("cookie_jar_cleared")

    def _persist(self, snapshot: list[Cookie]) -> None:
        """Write the jar; caller holds the lock."""
        try:
            self._store.save(snapshot)
        except PersistenceError as e:
            self._logger.error(
                "cookie_jar_save_failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
