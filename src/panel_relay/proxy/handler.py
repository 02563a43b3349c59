# -*- coding: utf-8 -*-
"""Reverse proxy handler: forward to the upstream, relay back, capture Set-Cookie."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Optional

import structlog
from aiohttp import hdrs, web
from multidict import CIMultiDict, CIMultiDictProxy
from structlog.contextvars import bound_contextvars
from yarl import URL

from panel_relay.config import Settings
from panel_relay.exceptions import (
    TargetResolutionError,
    UpstreamRequestError,
    UpstreamTimeoutError,
)
from panel_relay.proxy.target import resolve_target_url

if TYPE_CHECKING:
    from panel_relay.clients.http import AsyncHttpClient
    from panel_relay.services.cookie_jar import CookieJar

# Recomputed by aiohttp for the buffered body on both legs.
_FRAMING_HEADERS = frozenset({hdrs.CONTENT_LENGTH.lower(), hdrs.TRANSFER_ENCODING.lower()})
_RELAY_DROPPED_HEADERS = _FRAMING_HEADERS | {"connection", "keep-alive"}
# No body is relayed for these, so the upstream Content-Length is kept.
_BODYLESS_STATUSES = frozenset({204, 304})


def host_header(url: URL) -> str:
    """Host header value for url: host, plus the port when it is not the scheme default."""
    host = url.raw_host or ""
    if ":" in host:
        host = f"[{host}]"
    if url.port is not None and not url.is_default_port():
        return f"{host}:{url.port}"
    return host


class ReverseProxyHandler:
    """aiohttp handler relaying every inbound request to the upstream panel.

    On the gated domain the caller's Cookie header is replaced by the jar's
    cookies. Set-Cookie headers of every relayed response are merged into the
    jar (only the gated domain's when settings.proxy.gated_cookies_only).
    """

    def __init__(
        self,
        cookie_jar: CookieJar,
        http_client: AsyncHttpClient,
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the handler.

        Args:
            cookie_jar: Shared jar (base_url for resolution, cookies to inject and capture).
            http_client: Client for the outbound leg; should not auto-decompress.
            settings: Application settings (uses settings.proxy).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._jar = cookie_jar
        self._http = http_client
        self._settings = settings
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def is_gated(self, url: URL) -> bool:
        return (url.host or "").lower() == self._settings.proxy.gated_domain

    async def handle(self, request: web.Request) -> web.Response:
        """Serve one inbound request. Never raises for upstream or resolution errors."""
        try:
            target = resolve_target_url(request.raw_path, self._jar.base_url)
        except TargetResolutionError as e:
            self._logger.warning(
                "proxy_target_invalid",
                proxy_raw_target=request.raw_path,
                error_message=str(e),
            )
            return web.Response(status=400, text=str(e))

        with bound_contextvars(proxy_method=request.method, proxy_target=str(target)):
            body = await request.read()
            headers = self.outbound_headers(request.headers, target)

            try:
                upstream = await self._http.request(
                    request.method,
                    target,
                    headers=headers,
                    data=body,
                    allow_redirects=False,
                )
            except UpstreamTimeoutError as e:
                return web.Response(status=504, text=f"Request error: {e}")
            except UpstreamRequestError as e:
                return web.Response(status=502, text=f"Request error: {e}")

            self._capture_cookies(upstream.headers, target)
            self._logger.info(
                "proxy_request_relayed",
                http_status_code=upstream.status,
                http_body_bytes=len(upstream.body),
            )
            return web.Response(
                status=upstream.status,
                headers=self.relay_headers(
                    upstream.headers,
                    keep_content_length=(
                        request.method == hdrs.METH_HEAD
                        or upstream.status in _BODYLESS_STATUSES
                    ),
                ),
                body=upstream.body,
            )

    def outbound_headers(
        self,
        inbound: CIMultiDictProxy[str],
        target: URL,
    ) -> CIMultiDict[str]:
        """Copy inbound headers for the upstream leg.

        Host is rewritten to the target's host; framing headers are dropped.
        On the gated domain the inbound Cookie is dropped and the jar's cookie
        header (if any) is sent instead.
        """
        gated = self.is_gated(target)
        headers: CIMultiDict[str] = CIMultiDict()
        for name, value in inbound.items():
            lowered = name.lower()
            if lowered == hdrs.HOST.lower() or lowered in _FRAMING_HEADERS:
                continue
            if gated and lowered == hdrs.COOKIE.lower():
                continue
            headers.add(name, value)
        headers[hdrs.HOST] = host_header(target)
        if gated:
            cookie_header = self._jar.cookie_header()
            if cookie_header:
                headers.add(hdrs.COOKIE, cookie_header)
        return headers

    @staticmethod
    def relay_headers(
        upstream: CIMultiDictProxy[str],
        *,
        keep_content_length: bool = False,
    ) -> CIMultiDict[str]:
        """Upstream response headers minus framing and connection headers.

        With keep_content_length (HEAD, 204, 304) the upstream Content-Length
        is relayed as is.
        """
        dropped = _RELAY_DROPPED_HEADERS
        if keep_content_length:
            dropped = dropped - {hdrs.CONTENT_LENGTH.lower()}
        return CIMultiDict(
            (name, value)
            for name, value in upstream.items()
            if name.lower() not in dropped
        )

    def _capture_cookies(self, headers: CIMultiDictProxy[str], target: URL) -> None:
        set_cookies = headers.getall(hdrs.SET_COOKIE, [])
        if not set_cookies:
            return
        if self._settings.proxy.gated_cookies_only and not self.is_gated(target):
            self._logger.debug(
                "proxy_cookies_ignored",
                proxy_cookie_domain=target.host,
                cookie_count=len(set_cookies),
            )
            return
        self._jar.merge_set_cookie_headers(set_cookies, target.host or "")
