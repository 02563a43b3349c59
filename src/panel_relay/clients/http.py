# -*- coding: utf-8 -*-
"""Async HTTP client: one attempt per call, buffered bodies, typed transport errors."""

from __future__ import annotations

import asyncio
import json as jsonlib
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Optional

import aiohttp
import structlog
from multidict import CIMultiDict, CIMultiDictProxy
from structlog.contextvars import bound_contextvars
from yarl import URL

from panel_relay.config import Settings
from panel_relay.exceptions import PayloadDecodeError, UpstreamRequestError, UpstreamTimeoutError


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """Fully buffered upstream response."""

    status: int
    headers: CIMultiDictProxy[str]
    body: bytes
    url: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Decode the body as JSON.

        Raises:
            PayloadDecodeError: If the body is not valid UTF-8 JSON.
        """
        try:
            return jsonlib.loads(self.body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise PayloadDecodeError(f"Invalid JSON from {self.url}: {e}", url=self.url) from e


class AsyncHttpClient:
    """Async HTTP client shared by the reverse proxy and the panel API client.

    No retries: a failed call raises and the caller decides (the proxy answers
    5xx, the poller skips the page). The session has no cookie jar of its own;
    cookies are only ever sent through explicit Cookie headers.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        auto_decompress: bool = True,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Configuration (uses settings.api.timeout_seconds).
            session: Optional shared aiohttp session. If None, the client
                creates and owns a session (call aclose() when done).
            auto_decompress: Decode Content-Encoding on receipt. The proxy
                passes False so bodies are relayed byte for byte.
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._settings = settings
        self._session = session
        self._owns_session = session is None
        self._auto_decompress = auto_decompress
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._settings.api.timeout_seconds)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                cookie_jar=aiohttp.DummyCookieJar(),
                auto_decompress=self._auto_decompress,
            )
        return self._session

    async def aclose(self) -> None:
        """Close the session if this client owns it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> AsyncHttpClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        url: str | URL,
        *,
        headers: Optional[CIMultiDict[str]] = None,
        data: Optional[bytes] = None,
        allow_redirects: bool = True,
    ) -> HttpResponse:
        """Send one request and buffer the whole response body.

        Args:
            method: HTTP method, passed through as-is.
            url: Absolute URL; a yarl URL is sent exactly as encoded.
            headers: Request headers (duplicates allowed).
            data: Request body; None or empty sends no body.
            allow_redirects: Follow 3xx responses.

        Returns:
            HttpResponse with status, headers (duplicates preserved) and body.

        Raises:
            UpstreamTimeoutError: The request exceeded settings.api.timeout_seconds.
            UpstreamRequestError: Any other transport failure.
        """
        request_id = uuid.uuid4().hex[:12]
        with bound_contextvars(
            http_method=method,
            http_url=str(url),
            http_request_id=request_id,
        ):
            try:
                session = await self._get_session()
                async with session.request(
                    method,
                    url,
                    headers=headers,
                    data=data or None,
                    allow_redirects=allow_redirects,
                ) as response:
                    body = await response.read()
                    self._logger.debug(
                        "http_response_received",
                        http_status_code=response.status,
                        http_body_bytes=len(body),
                    )
                    return HttpResponse(
                        status=response.status,
                        headers=CIMultiDictProxy(CIMultiDict(response.headers)),
                        body=body,
                        url=str(response.url),
                    )
            except asyncio.TimeoutError as e:
                self._logger.warning(
                    "http_request_timeout",
                    http_timeout_seconds=self._settings.api.timeout_seconds,
                )
                raise UpstreamTimeoutError(
                    f"Request timed out after {self._settings.api.timeout_seconds}s: {url}",
                    url=str(url),
                    cause=e,
                ) from e
            except aiohttp.ClientError as e:
                self._logger.warning(
                    "http_request_failed",
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                raise UpstreamRequestError(
                    f"{type(e).__name__}: {e}",
                    url=str(url),
                    cause=e,
                ) from e
