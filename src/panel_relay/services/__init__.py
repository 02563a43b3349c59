"""Services: cookie jar and transaction polling."""

from panel_relay.services.cookie_jar import CookieJar
from panel_relay.services.polling import PollCycleResult, TransactionPoller

__all__ = ["CookieJar", "PollCycleResult", "TransactionPoller"]
