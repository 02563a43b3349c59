"""Transaction polling (panel payouts -> local ledger)."""

from panel_relay.services.polling.transaction_poller import PollCycleResult, TransactionPoller

__all__ = ["PollCycleResult", "TransactionPoller"]
