# -*- coding: utf-8 -*-
"""Configuration loaded from environment via Pydantic Settings.

Nested env vars use <section>__<key>, e.g. LOGGING__CONSOLE_LEVEL, PROXY__PORT.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal, Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict
from yarl import URL

DEFAULT_UPSTREAM_BASE_URL = "https://panel.gate.cx/"

DEFAULT_PAYOUTS_URL = (
    "https://panel.gate.cx/api/v1/payments/payouts"
    "?filters%5Bstatus%5D%5B%5D=2"
    "&filters%5Bstatus%5D%5B%5D=3"
    "&filters%5Bstatus%5D%5B%5D=7"
    "&filters%5Bstatus%5D%5B%5D=8"
    "&filters%5Bstatus%5D%5B%5D=9"
    "&page="
)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36"
)


class AppSettings(BaseSettings):
    """General application configuration."""

    model_config = SettingsConfigDict(env_prefix="APP__", extra="ignore")

    app_name: str = "panel-relay"
    service_name: Optional[str] = None
    service_version: Optional[str] = None
    environment: Literal["development", "test", "production"] = "development"


class LoggingSettings(BaseSettings):
    """Structured logging configuration for structlog/stdlib/Logfire."""

    model_config = SettingsConfigDict(env_prefix="LOGGING__", extra="ignore")

    console_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    logfire_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    log_to_console: bool = True
    log_to_file: bool = False
    log_file_path: str = "logs/panel_relay.log"
    # TimedRotatingFileHandler: when to rotate (S/M/H/D/W0–W6/midnight), interval, backups to keep
    log_file_when: Literal[
        "S", "M", "H", "D", "W0", "W1", "W2", "W3", "W4", "W5", "W6", "midnight"
    ] = "midnight"
    log_file_interval: int = 1
    log_file_backup_count: int = 30
    log_file_utc: bool = True

    # Main output format: JSONRenderer if True, ConsoleRenderer if False
    json_format: bool = False

    logfire_enabled: bool = False
    logfire_token: Optional[str] = None


class ApiSettings(BaseSettings):
    """Outbound HTTP configuration shared by the proxy and the poller."""

    model_config = SettingsConfigDict(env_prefix="API__", extra="ignore")

    timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Total timeout for one outbound HTTP request, in seconds.",
    )


class ProxySettings(BaseSettings):
    """Local reverse proxy (from env PROXY__*)."""

    model_config = SettingsConfigDict(env_prefix="PROXY__", extra="ignore")

    host: str = Field(default="127.0.0.1", description="Listen address.")
    port: int = Field(default=8080, ge=0, le=65535, description="Listen port.")
    upstream_base_url: str = Field(
        default=DEFAULT_UPSTREAM_BASE_URL,
        description="Base URL relative request paths are resolved against.",
    )
    gated_domain_raw: Optional[str] = Field(
        default=None,
        description="Host that receives jar cookies. Env: PROXY__GATED_DOMAIN. Defaults to the upstream host.",
        validation_alias="gated_domain",
    )
    max_concurrent_requests: int = Field(
        default=64,
        ge=1,
        le=10000,
        description="Maximum number of proxied requests in flight at once.",
    )
    max_body_bytes: int = Field(
        default=64 * 1024 * 1024,
        ge=1024,
        description="Largest inbound request body buffered before forwarding.",
    )
    gated_cookies_only: bool = Field(
        default=False,
        description="Only capture Set-Cookie headers from the gated domain.",
    )

    @computed_field
    @property
    def gated_domain(self) -> str:
        """Explicit gated domain, or the host of upstream_base_url."""
        if self.gated_domain_raw and self.gated_domain_raw.strip():
            return self.gated_domain_raw.strip().lower()
        return (URL(self.upstream_base_url).host or "").lower()


class PollingSettings(BaseSettings):
    """Transactions polling (from env POLLING__*)."""

    model_config = SettingsConfigDict(env_prefix="POLLING__", extra="ignore")

    enabled: bool = True
    payouts_url: str = Field(
        default=DEFAULT_PAYOUTS_URL,
        description="Paginated listing URL; the page number is appended verbatim.",
    )
    max_pages: int = Field(default=10, ge=1, le=100, description="Pages fetched per cycle.")
    poll_seconds: float = Field(
        default=5.0,
        ge=0.5,
        le=3600.0,
        description="Sleep between poll cycles, in seconds.",
    )
    user_agent: str = DEFAULT_USER_AGENT


class StorageSettings(BaseSettings):
    """On-disk JSON files (from env STORAGE__*)."""

    model_config = SettingsConfigDict(env_prefix="STORAGE__", extra="ignore")

    cookie_jar_path: str = "cookies.json"
    ledger_path: str = "idex_history.json"


class Settings(BaseSettings):
    """Root application configuration.

    Groups all sub-configurations so the rest of the code does not
    read environment variables directly. Nested overrides use
    <section>__<key>, e.g. LOGGING__CONSOLE_LEVEL, POLLING__POLL_SECONDS.
    """

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    polling: PollingSettings = Field(default_factory=PollingSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    @classmethod
    def from_env(cls, **overrides: Any) -> Settings:
        """Build settings from environment (and .env), with optional overrides.

        Nested overrides can be passed as nested dicts, e.g.
        from_env(proxy={"port": 9090}).

        Returns:
            A new Settings instance.
        """
        return cls(**overrides)


@lru_cache
def get_settings() -> Settings:
    """Return a single cached instance of Settings.

    Typical usage:

        from panel_relay.config import get_settings

        settings = get_settings()
        port = settings.proxy.port
    """
    return Settings()
