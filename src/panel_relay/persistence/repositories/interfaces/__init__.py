# -*- coding: utf-8 -*-
"""Store interfaces (abstractions). Implementations live in json_file/."""

from panel_relay.persistence.repositories.interfaces.cookie_store import ICookieStore
from panel_relay.persistence.repositories.interfaces.transaction_store import (
    ITransactionStore,
)

__all__ = ["ICookieStore", "ITransactionStore"]
