"""Exceptions subpackage."""

from panel_relay.exceptions.exceptions import (
    MissingRequiredConfigError,
    PanelAPIError,
    PanelRelayError,
    PayloadDecodeError,
    PersistenceError,
    StoreDecodeError,
    TargetResolutionError,
    UpstreamRequestError,
    UpstreamTimeoutError,
)

__all__ = [
    "MissingRequiredConfigError",
    "PanelAPIError",
    "PanelRelayError",
    "PayloadDecodeError",
    "PersistenceError",
    "StoreDecodeError",
    "TargetResolutionError",
    "UpstreamRequestError",
    "UpstreamTimeoutError",
]
