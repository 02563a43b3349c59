# -*- coding: utf-8 -*-
"""Domain models."""

from panel_relay.models.cookie import Cookie
from panel_relay.models.transaction import Transaction

__all__ = ["Cookie", "Transaction"]
