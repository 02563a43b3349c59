# -*- coding: utf-8 -*-
"""Panel payouts API client (session-cookie authenticated)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, List, Optional, cast

import structlog
from multidict import CIMultiDict
from structlog.contextvars import bound_contextvars

from panel_relay.clients.panel_api.schema import TRANSACTION_ARRAY_PATHS, PayoutSchema
from panel_relay.config import Settings
from panel_relay.exceptions import PanelAPIError

if TYPE_CHECKING:
    from panel_relay.clients.http import AsyncHttpClient


_MISSING = object()


def _find(body: Any, path: tuple[str, ...]) -> Any:
    current = body
    for key in path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def extract_payouts(body: Any) -> List[PayoutSchema]:
    """Return the payouts array of a decoded page body.

    Tries data.transactions, then response.payouts.data. The first path present
    in the body decides, even when its value is null or not an array; such a
    page yields an empty list, as does a body matching neither shape.
    Non-object elements are kept out.
    """
    for path in TRANSACTION_ARRAY_PATHS:
        items = _find(body, path)
        if items is _MISSING:
            continue
        if not isinstance(items, list):
            return []
        return [cast(PayoutSchema, x) for x in cast(list[Any], items) if isinstance(x, dict)]
    return []


class PanelApiClient:
    """Client for the panel payouts listing (GET <payouts_url><page>)."""

    def __init__(
        self,
        http_client: "AsyncHttpClient",
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the client.

        Args:
            http_client: Async HTTP client (e.g. AsyncHttpClient).
            settings: Application settings (uses settings.polling).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._http = http_client
        self._settings = settings
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def page_url(self, page: int) -> str:
        """Listing URL for a 1-based page number (appended verbatim)."""
        return f"{self._settings.polling.payouts_url}{page}"

    async def get_payouts_page(
        self,
        page: int,
        *,
        cookie_header: str = "",
    ) -> Any:
        """Fetch one listing page and return its decoded JSON body.

        Args:
            page: 1-based page number.
            cookie_header: Value for the Cookie header; omitted when empty.

        Returns:
            Decoded JSON body (shape varies; see extract_payouts).

        Raises:
            UpstreamRequestError: Transport failure or timeout.
            PanelAPIError: Non-2xx status.
            PayloadDecodeError: Body is not valid JSON.
        """
        url = self.page_url(page)
        headers = CIMultiDict({"User-Agent": self._settings.polling.user_agent})
        if cookie_header:
            headers["Cookie"] = cookie_header

        with bound_contextvars(panel_api_page=page):
            self._logger.debug("panel_api_request", http_url=url, cookie_header=cookie_header)
            response = await self._http.request("GET", url, headers=headers)
            if not response.ok:
                self._logger.debug(
                    "panel_api_non_success",
                    http_status_code=response.status,
                    http_body_preview=response.text()[:200],
                )
                raise PanelAPIError(
                    f"GET page {page} returned HTTP {response.status}",
                    url=url,
                    status_code=response.status,
                )
            return response.json()
