"""Panel payouts API response types (only the keys this client reads)."""

from __future__ import annotations

from typing import Any, TypedDict


class AmountByCurrencySchema(TypedDict, total=False):
    """Amounts keyed by currency code ("643" = RUB, "000001" = USDT)."""

    trader: dict[str, float]


class PayoutSchema(TypedDict, total=False):
    """One payouts list item. id is a string or an integer depending on the endpoint version."""

    id: str | int
    userId: str
    payment_method_id: str
    wallet: str
    amount: AmountByCurrencySchema
    total: AmountByCurrencySchema
    status: str
    bank: dict[str, Any]
    method: dict[str, Any]
    meta: dict[str, Any]
    tooltip: dict[str, Any]
    approved_at: str
    expired_at: str
    created_at: str
    updated_at: str
    trader: dict[str, Any]
    attachments: Any


TRANSACTION_ARRAY_PATHS: tuple[tuple[str, ...], ...] = (
    ("data", "transactions"),
    ("response", "payouts", "data"),
)
"""Known locations of the payouts array in a page body, tried in order."""
