"""Transaction: one payout record ingested from the panel API.

transaction_id is the identity inside the ledger. Every other field is a
best-effort extraction from the upstream JSON, which comes in several shapes;
a missing or mistyped source value yields the field default, never an error.
Records are append-only: once in the ledger they are never updated.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Optional

from panel_relay.utils.json_path import as_float, as_str, as_uint, dig, extract_id

RUB_CODE = "643"
"""ISO 4217 numeric code the panel uses for rouble amounts."""
USDT_CODE = "000001"
"""Panel-internal currency code for USDT amounts."""


@dataclass(frozen=True, slots=True)
class Transaction:
    """Normalized payout record as persisted in the ledger file."""

    transaction_id: str
    user_id: Optional[str] = None
    payment_method_id: Optional[str] = None
    wallet: Optional[str] = None
    amount_rub: float = 0.0
    amount_usdt: float = 0.0
    total_rub: float = 0.0
    total_usdt: float = 0.0
    status: Optional[str] = None
    bank_name: Optional[str] = None
    bank_code: Optional[str] = None
    bank_label: Optional[str] = None
    payment_method: Optional[str] = None
    course: Optional[float] = None
    """Trader exchange rate (meta.courses.trader)."""
    success_count: Optional[int] = None
    success_rate: Optional[float] = None
    approved_at: Optional[str] = None
    expired_at: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""
    trader_id: Optional[str] = None
    trader_name: Optional[str] = None
    attachments: Optional[Any] = None
    """Raw attachments payload, kept as decoded JSON."""
    idex_id: Optional[str] = None
    """Internal correlation id; not provided by the panel."""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Transaction:
        """Build from a persisted ledger entry; unknown keys are ignored.

        Raises:
            ValueError: If transaction_id is missing or not a string.
        """
        if not isinstance(data.get("transaction_id"), str):
            raise ValueError("transaction_id must be a string")
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_response(cls, item: dict[str, Any]) -> Optional[Transaction]:
        """Map a raw payouts item into a Transaction.

        Returns None when the item has no usable id (string or integer).
        """
        transaction_id = extract_id(item.get("id"))
        if transaction_id is None:
            return None
        return cls(
            transaction_id=transaction_id,
            user_id=as_str(item.get("userId")),
            payment_method_id=as_str(item.get("payment_method_id")),
            wallet=as_str(item.get("wallet")),
            amount_rub=as_float(dig(item, "amount", "trader", RUB_CODE)) or 0.0,
            amount_usdt=as_float(dig(item, "amount", "trader", USDT_CODE)) or 0.0,
            total_rub=as_float(dig(item, "total", "trader", RUB_CODE)) or 0.0,
            total_usdt=as_float(dig(item, "total", "trader", USDT_CODE)) or 0.0,
            status=as_str(item.get("status")),
            bank_name=as_str(dig(item, "bank", "name")),
            bank_code=as_str(dig(item, "bank", "code")),
            bank_label=as_str(dig(item, "bank", "label")),
            payment_method=as_str(dig(item, "method", "label")),
            course=as_float(dig(item, "meta", "courses", "trader")),
            success_count=as_uint(dig(item, "tooltip", "payments", "success")),
            success_rate=as_float(dig(item, "tooltip", "payments", "percent")),
            approved_at=as_str(item.get("approved_at")),
            expired_at=as_str(item.get("expired_at")),
            created_at=as_str(item.get("created_at")) or "",
            updated_at=as_str(item.get("updated_at")) or "",
            trader_id=as_str(dig(item, "trader", "id")),
            trader_name=as_str(dig(item, "trader", "name")),
            attachments=item.get("attachments"),
        )
