"""Configuration subpackage."""

from panel_relay.config.config import (
    ApiSettings,
    AppSettings,
    LoggingSettings,
    PollingSettings,
    ProxySettings,
    Settings,
    StorageSettings,
    get_settings,
)

__all__ = [
    "ApiSettings",
    "AppSettings",
    "LoggingSettings",
    "PollingSettings",
    "ProxySettings",
    "Settings",
    "StorageSettings",
    "get_settings",
]
