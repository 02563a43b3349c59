"""Panel payouts API client."""

from panel_relay.clients.panel_api.panel_api import PanelApiClient, extract_payouts
from panel_relay.clients.panel_api.schema import PayoutSchema

__all__ = ["PanelApiClient", "PayoutSchema", "extract_payouts"]
