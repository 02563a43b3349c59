# -*- coding: utf-8 -*-
"""
Entry point for the panel relay.

Orchestrates: logging, settings, container, cookie jar load, reverse proxy,
transaction poller, shutdown (SIGINT or CancelledError).
Proxy: client -> ProxyServer -> upstream panel (cookies captured into the jar).
Poller: jar cookies -> payouts API -> ledger file.

Run with: python -m panel_relay.main  (or the panel-relay console script)
"""
from __future__ import annotations

import asyncio
import signal
from typing import Any, Optional

import structlog

from panel_relay.DI import Container
from panel_relay.config import Settings, get_settings
from panel_relay.exceptions import MissingRequiredConfigError
from panel_relay.logging.config import configure_logging
from panel_relay.utils.validation import is_http_url


def _setup_sigint(shutdown_event: asyncio.Event) -> None:
    try:
        loop = asyncio.get_running_loop()
        loop.add_signal_handler(
            signal.SIGINT,
            lambda: shutdown_event.set(),
        )
    except NotImplementedError:
        pass  # Windows has no add_signal_handler


def _validate(settings: Settings, logger: Any) -> None:
    if not is_http_url(settings.proxy.upstream_base_url):
        logger.error(
            "main_invalid_upstream",
            message="PROXY__UPSTREAM_BASE_URL must be an absolute http(s) URL",
        )
        raise MissingRequiredConfigError("PROXY__UPSTREAM_BASE_URL")
    if settings.polling.enabled and not is_http_url(settings.polling.payouts_url):
        logger.error(
            "main_invalid_payouts_url",
            message="POLLING__PAYOUTS_URL must be an absolute http(s) URL",
        )
        raise MissingRequiredConfigError("POLLING__PAYOUTS_URL")


async def run(
    container: Optional[Container] = None,
    shutdown_event: Optional[asyncio.Event] = None,
) -> None:
    """Start proxy and poller, wait for shutdown_event (SIGINT by default), then stop both.

    Args:
        container: Pre-built container (tests, embedding UIs); defaults to a new Container.
        shutdown_event: Set it to stop; defaults to an event set on SIGINT.
    """
    settings = container.config() if container is not None else get_settings()
    configure_logging(settings)
    logger = structlog.get_logger("main")
    _validate(settings, logger)

    if container is None:
        container = Container()
    cookie_jar = container.cookie_jar()
    proxy_server = container.proxy_server()
    poller = container.transaction_poller()

    if shutdown_event is None:
        shutdown_event = asyncio.Event()
        _setup_sigint(shutdown_event)

    try:
        await proxy_server.start()
        if settings.polling.enabled:
            await poller.start()
        logger.info(
            "main_started",
            proxy_display_url=proxy_server.display_url(),
            cookie_count=len(cookie_jar),
            polling_enabled=settings.polling.enabled,
        )
        try:
            await shutdown_event.wait()
        except asyncio.CancelledError:
            logger.info("main_cancelled")
            raise
    finally:
        await poller.stop()
        await proxy_server.stop()
        await container.proxy_http_client().aclose()
        await container.api_http_client().aclose()
        logger.info("main_shutdown_complete")


def main() -> None:
    asyncio.run(run())


__all__ = ["run", "main"]

if __name__ == "__main__":
    main()
