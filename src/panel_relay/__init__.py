"""Panel relay: cookie-capturing reverse proxy and payouts ledger poller."""

from panel_relay.clients import AsyncHttpClient, PanelApiClient
from panel_relay.config import get_settings
from panel_relay.DI import Container
from panel_relay.models import Cookie, Transaction
from panel_relay.proxy import ProxyServer, ReverseProxyHandler
from panel_relay.services import CookieJar, TransactionPoller

__version__ = "0.1.0"
__all__ = [
    "AsyncHttpClient",
    "Container",
    "Cookie",
    "CookieJar",
    "PanelApiClient",
    "ProxyServer",
    "ReverseProxyHandler",
    "Transaction",
    "TransactionPoller",
    "get_settings",
]
