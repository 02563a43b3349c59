# -*- coding: utf-8 -*-
"""Repositories: interfaces (abstractions) and implementations (json_file, etc.)."""

from panel_relay.persistence.repositories.interfaces import (
    ICookieStore,
    ITransactionStore,
)
from panel_relay.persistence.repositories.json_file import (
    JsonFileCookieStore,
    JsonFileTransactionStore,
)

__all__ = [
    "ICookieStore",
    "ITransactionStore",
    "JsonFileCookieStore",
    "JsonFileTransactionStore",
]
