# -*- coding: utf-8 -*-
"""Local HTTP listener dispatching every request to the ReverseProxyHandler."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

import structlog
from aiohttp import web

from panel_relay.config import Settings

if TYPE_CHECKING:
    from panel_relay.proxy.handler import ReverseProxyHandler

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def concurrency_limit_middleware(limit: int) -> Any:
    """Middleware allowing at most limit requests inside the handler at once."""
    semaphore = asyncio.Semaphore(limit)

    @web.middleware
    async def _limit(request: web.Request, handler: Handler) -> web.StreamResponse:
        async with semaphore:
            return await handler(request)

    return _limit


class ProxyServer:
    """Owns the aiohttp app, runner and TCP site bound to settings.proxy.host:port.

    One handler invocation per request; requests run concurrently up to
    settings.proxy.max_concurrent_requests.
    """

    def __init__(
        self,
        handler: ReverseProxyHandler,
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the server (nothing is bound until start()).

        Args:
            handler: Per-request proxy handler.
            settings: Application settings (uses settings.proxy).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._handler = handler
        self._settings = settings
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self._runner: Optional[web.AppRunner] = None
        self._port: Optional[int] = None

    def build_app(self) -> web.Application:
        """aiohttp application routing every method and path to the handler."""
        proxy = self._settings.proxy
        app = web.Application(
            middlewares=[concurrency_limit_middleware(proxy.max_concurrent_requests)],
            client_max_size=proxy.max_body_bytes,
        )
        app.router.add_route("*", "/{tail:.*}", self._handler.handle)
        return app

    @property
    def is_running(self) -> bool:
        return self._runner is not None

    @property
    def host(self) -> str:
        return self._settings.proxy.host

    @property
    def port(self) -> int:
        """Bound port once started (useful with PROXY__PORT=0), configured port before."""
        return self._port if self._port is not None else self._settings.proxy.port

    def display_url(self, target: str | None = None) -> str:
        """URL a display surface loads to reach target through the proxy.

        Args:
            target: Absolute upstream URL; defaults to the configured base URL.
        """
        target = target if target is not None else self._settings.proxy.upstream_base_url
        return f"http://{self.host}:{self.port}/{target}"

    async def start(self) -> None:
        """Bind and start serving. Idempotent."""
        if self._runner is not None:
            return
        runner = web.AppRunner(self.build_app(), access_log=None)
        await runner.setup()
        site = web.TCPSite(runner, self.host, self._settings.proxy.port)
        try:
            await site.start()
        except OSError:
            await runner.cleanup()
            raise
        self._runner = runner
        self._port = self._bound_port(runner)
        self._logger.info(
            "proxy_server_listening",
            proxy_address=f"http://{self.host}:{self.port}",
            proxy_upstream=self._settings.proxy.upstream_base_url,
            proxy_gated_domain=self._settings.proxy.gated_domain,
        )

    async def stop(self) -> None:
        """Stop serving and release the socket. Idempotent."""
        runner = self._runner
        if runner is None:
            return
        self._runner = None
        self._port = None
        await runner.cleanup()
        self._logger.info("proxy_server_stopped")

    async def __aenter__(self) -> ProxyServer:
        await self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.stop()

    @staticmethod
    def _bound_port(runner: web.AppRunner) -> Optional[int]:
        for address in runner.addresses:
            if isinstance(address, tuple) and len(address) >= 2:
                return int(address[1])
        return None
