"""HTTP and API clients."""

from panel_relay.clients.http import AsyncHttpClient, HttpResponse
from panel_relay.clients.panel_api import PanelApiClient

__all__ = ["AsyncHttpClient", "HttpResponse", "PanelApiClient"]
