"""Custom exceptions for the proxy, the panel API and local persistence."""

from __future__ import annotations


class PanelRelayError(Exception):
    """Base exception for panel-relay errors."""

    pass


class MissingRequiredConfigError(PanelRelayError):
    """Raised when a required configuration value is missing."""

    pass


class TargetResolutionError(PanelRelayError):
    """Raised when an inbound proxy path cannot be turned into an upstream URL."""

    def __init__(self, message: str, *, raw_target: str | None = None) -> None:
        super().__init__(message)
        self.raw_target = raw_target


class UpstreamRequestError(PanelRelayError):
    """Raised when an outbound request fails at the transport level."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.cause = cause


class UpstreamTimeoutError(UpstreamRequestError):
    """Raised when an outbound request exceeds the configured timeout."""

    pass


class PanelAPIError(PanelRelayError):
    """Raised when the panel API answers with a non-success status."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class PayloadDecodeError(PanelRelayError):
    """Raised when a panel API response body is not valid JSON."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class PersistenceError(PanelRelayError):
    """Raised when a local JSON file cannot be read or written."""

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.cause = cause


class StoreDecodeError(PersistenceError):
    """Raised when a local JSON file exists but its content cannot be decoded."""

    pass
