# -*- coding: utf-8 -*-
"""Logging configuration: structlog over stdlib handlers, optional Logfire.

Console output uses ConsoleRenderer (or JSON when LOGGING__JSON_FORMAT=true);
the rotating file is always JSON. Cookie values never reach the renderer in
clear text: any event field named in SENSITIVE_FIELDS is masked.
"""

from __future__ import annotations

import logging
import logfire
import structlog
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Optional
from structlog.types import EventDict, Processor

from panel_relay.config import Settings, get_settings
from panel_relay.utils.validation import mask_secret

LOG_LEVEL_TO_LOGFIRE: dict[str, str] = {
    "DEBUG": "debug",
    "INFO": "info",
    "WARNING": "warn",
    "ERROR": "error",
    "CRITICAL": "fatal",
}

SENSITIVE_FIELDS: frozenset[str] = frozenset({"cookie_header"})


def _add_service_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Attach logger name, app_name, service info and environment to every log event."""
    stdlib_logger = getattr(logger, "_logger", None)
    event_dict["logger"] = (
        getattr(stdlib_logger, "name", None) or getattr(logger, "name", "") or ""
    )
    app_settings = get_settings().app
    event_dict["app_name"] = app_settings.app_name
    if app_settings.service_name:
        event_dict["service_name"] = app_settings.service_name
    if app_settings.service_version:
        event_dict["service_version"] = app_settings.service_version
    event_dict["environment"] = app_settings.environment
    return event_dict


def _mask_sensitive_fields(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    for key in SENSITIVE_FIELDS.intersection(event_dict):
        value = event_dict[key]
        event_dict[key] = mask_secret(value if isinstance(value, str) else None)
    return event_dict


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def _build_handlers(settings: Settings) -> list[logging.Handler]:
    logging_settings = settings.logging
    handlers: list[logging.Handler] = []

    if logging_settings.log_to_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(_level(logging_settings.console_level))
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        handlers.append(console_handler)

    if logging_settings.log_to_file:
        log_file_path = Path(logging_settings.log_file_path)
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            log_file_path,
            when=logging_settings.log_file_when,
            interval=logging_settings.log_file_interval,
            backupCount=logging_settings.log_file_backup_count,
            encoding="utf-8",
            utc=logging_settings.log_file_utc,
        )
        file_handler.setLevel(_level(logging_settings.file_level))
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        handlers.append(file_handler)

    return handlers


def _configure_logfire(settings: Settings) -> None:
    app_settings = settings.app
    logging_settings = settings.logging
    logfire.configure(
        token=logging_settings.logfire_token,
        service_name=app_settings.service_name or app_settings.app_name,
        service_version=app_settings.service_version,
        min_level=LOG_LEVEL_TO_LOGFIRE.get(logging_settings.logfire_level, "info"),  # type: ignore[arg-type]
        environment=app_settings.environment,
    )


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure stdlib handlers, Logfire (if enabled) and the structlog processor chain.

    Args:
        settings: Settings to use; defaults to get_settings().
    """
    settings = settings or get_settings()
    logging_settings = settings.logging

    handlers = _build_handlers(settings)
    if handlers:
        logging.basicConfig(
            level=min(handler.level for handler in handlers),
            handlers=handlers,
        )
        # aiohttp.access logs every proxied request on its own; keep it at WARNING.
        logging.getLogger("aiohttp.access").setLevel(logging.WARNING)

    if logging_settings.logfire_enabled:
        _configure_logfire(settings)

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _add_service_context,
        _mask_sensitive_fields,
    ]

    if logging_settings.logfire_enabled:
        processors.append(logfire.StructlogProcessor())  # type: ignore[arg-type]

    use_json = logging_settings.log_to_file or logging_settings.json_format
    renderer: Any = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer()
    )
    processors.append(renderer)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
