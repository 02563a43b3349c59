"""JSON-file store implementations."""

from panel_relay.persistence.repositories.json_file.cookie_store import JsonFileCookieStore
from panel_relay.persistence.repositories.json_file.transaction_store import (
    JsonFileTransactionStore,
)

__all__ = ["JsonFileCookieStore", "JsonFileTransactionStore"]
