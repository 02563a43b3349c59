# -*- coding: utf-8 -*-
"""Dependency injection container (dependency-injector).

The container is the process-wide context object: every shared handle (jar,
stores, HTTP clients) is a Singleton built once and injected by reference.
"""

from __future__ import annotations

from dependency_injector import containers, providers

from panel_relay.clients.http import AsyncHttpClient
from panel_relay.clients.panel_api import PanelApiClient
from panel_relay.config import Settings, get_settings
from panel_relay.persistence.repositories.json_file import (
    JsonFileCookieStore,
    JsonFileTransactionStore,
)
from panel_relay.proxy.handler import ReverseProxyHandler
from panel_relay.proxy.server import ProxyServer
from panel_relay.services.cookie_jar import CookieJar
from panel_relay.services.polling import TransactionPoller


def _build_cookie_store(settings: Settings) -> JsonFileCookieStore:
    """Build the cookie jar file store from settings.storage."""
    return JsonFileCookieStore(settings.storage.cookie_jar_path)


def _build_transaction_store(settings: Settings) -> JsonFileTransactionStore:
    """Build the ledger file store from settings.storage."""
    return JsonFileTransactionStore(settings.storage.ledger_path)


def _build_cookie_jar(settings: Settings, store: JsonFileCookieStore) -> CookieJar:
    """Load the persisted jar (or an empty one) for the configured upstream."""
    return CookieJar.load(store, settings.proxy.upstream_base_url)


class Container(containers.DeclarativeContainer):
    """Application container. Wires settings, stores, cookie jar, HTTP clients, proxy and poller."""

    config = providers.Callable(get_settings)

    cookie_store = providers.Singleton(_build_cookie_store, config)

    transaction_store = providers.Singleton(_build_transaction_store, config)

    cookie_jar = providers.Singleton(_build_cookie_jar, config, cookie_store)

    proxy_http_client = providers.Singleton(
        AsyncHttpClient,
        settings=config,
        auto_decompress=False,
        logger_name="ProxyHttpClient",
    )

    api_http_client = providers.Singleton(
        AsyncHttpClient,
        settings=config,
        logger_name="PanelHttpClient",
    )

    panel_api_client = providers.Singleton(
        PanelApiClient,
        http_client=api_http_client,
        settings=config,
    )

    proxy_handler = providers.Singleton(
        ReverseProxyHandler,
        cookie_jar=cookie_jar,
        http_client=proxy_http_client,
        settings=config,
    )

    proxy_server = providers.Singleton(
        ProxyServer,
        handler=proxy_handler,
        settings=config,
    )

    transaction_poller = providers.Singleton(
        TransactionPoller,
        settings=config,
        panel_api=panel_api_client,
        cookie_jar=cookie_jar,
        transaction_store=transaction_store,
    )
