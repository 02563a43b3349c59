"""Local reverse proxy to the gated upstream panel."""

from panel_relay.proxy.handler import ReverseProxyHandler
from panel_relay.proxy.server import ProxyServer
from panel_relay.proxy.target import resolve_target_url

__all__ = ["ProxyServer", "ReverseProxyHandler", "resolve_target_url"]
