"""Persistence layer (cookie jar and transaction ledger stores)."""

from panel_relay.persistence.repositories import (
    ICookieStore,
    ITransactionStore,
    JsonFileCookieStore,
    JsonFileTransactionStore,
)

__all__ = [
    "ICookieStore",
    "ITransactionStore",
    "JsonFileCookieStore",
    "JsonFileTransactionStore",
]
