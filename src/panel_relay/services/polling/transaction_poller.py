"""Transaction poller: every interval, read N payouts pages and append unseen ids to the ledger.

One background task runs the loop (start()/stop() are idempotent), so two
cycles never overlap and the ledger keeps a single writer. The ledger is
reloaded from disk at the start of every cycle.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

import structlog

from panel_relay.clients.panel_api import extract_payouts
from panel_relay.exceptions import (
    PanelAPIError,
    PayloadDecodeError,
    PersistenceError,
    UpstreamRequestError,
)
from panel_relay.models.transaction import Transaction
from panel_relay.utils.json_path import extract_id

if TYPE_CHECKING:
    from panel_relay.clients.panel_api import PanelApiClient
    from panel_relay.config import Settings
    from panel_relay.persistence.repositories.interfaces.transaction_store import (
        ITransactionStore,
    )
    from panel_relay.services.cookie_jar import CookieJar


@dataclass(frozen=True, slots=True)
class PollCycleResult:
    """Outcome of one poll cycle."""

    pages_ok: int = 0
    pages_failed: int = 0
    new_transactions: tuple[Transaction, ...] = field(default_factory=tuple)
    persisted: bool = False
    """True when the ledger file was rewritten this cycle."""
    skipped: bool = False
    """True when the ledger could not be loaded and no page was fetched."""


class TransactionPoller:
    """Polls the panel payouts listing and appends new transactions to the ledger."""

    def __init__(
        self,
        settings: Settings,
        panel_api: PanelApiClient,
        cookie_jar: CookieJar,
        transaction_store: ITransactionStore,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        """Initialize the poller.

        Args:
            settings: Application settings (uses settings.polling).
            panel_api: Payouts API client (injected).
            cookie_jar: Shared jar; its cookie header is read before every page.
            transaction_store: Ledger store (load at cycle start, append on new ids).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._settings = settings
        self._api = panel_api
        self._jar = cookie_jar
        self._store = transaction_store
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self._lock = asyncio.Lock()
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the poll loop in a background task. Idempotent."""
        async with self._lock:
            if self.is_running:
                return
            self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        """Cancel the poll loop and wait for it to finish. Idempotent."""
        async with self._lock:
            task = self._task
            self._task = None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def run(self) -> None:
        """Run cycles forever, sleeping settings.polling.poll_seconds between them.

        Errors inside a cycle are logged and the loop goes on; only
        cancellation stops it.
        """
        polling = self._settings.polling
        self._logger.info(
            "poller_started",
            poll_seconds=polling.poll_seconds,
            poll_max_pages=polling.max_pages,
        )
        try:
            while True:
                try:
                    await self.run_cycle()
                except Exception as e:
                    self._logger.exception(
                        "poll_cycle_exception",
                        error_type=type(e).__name__,
                        error_message=str(e),
                    )
                await asyncio.sleep(polling.poll_seconds)
        except asyncio.CancelledError:
            self._logger.info("poller_stopped", poll_stop_reason="cancelled")
            raise

    async def run_cycle(self) -> PollCycleResult:
        """Fetch pages 1..max_pages once and persist newly seen transactions."""
        try:
            ledger = self._store.load()
        except PersistenceError as e:
            self._logger.error(
                "poll_ledger_load_failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return PollCycleResult(skipped=True)

        known_ids = {tx.transaction_id for tx in ledger}
        new_transactions: list[Transaction] = []
        pages_ok = 0
        pages_failed = 0

        for page in range(1, self._settings.polling.max_pages + 1):
            try:
                body = await self._api.get_payouts_page(
                    page,
                    cookie_header=self._jar.cookie_header(),
                )
            except (UpstreamRequestError, PanelAPIError, PayloadDecodeError) as e:
                pages_failed += 1
                self._logger.warning(
                    "poll_page_failed",
                    poll_page=page,
                    error_type=type(e).__name__,
                    error_message=str(e),
                    http_status_code=getattr(e, "status_code", None),
                )
                continue

            pages_ok += 1
            items = extract_payouts(body)
            if not items:
                self._logger.debug("poll_page_without_transactions", poll_page=page)
                continue

            for item in items:
                transaction_id = extract_id(item.get("id"))
                if transaction_id is None:
                    self._logger.debug("poll_item_without_id", poll_page=page)
                    continue
                if transaction_id in known_ids:
                    continue
                transaction = Transaction.from_response(dict(item))
                if transaction is None:
                    continue
                known_ids.add(transaction_id)
                new_transactions.append(transaction)
                self._logger.info(
                    "poll_new_transaction",
                    poll_page=page,
                    transaction_id=transaction_id,
                    transaction_status=transaction.status,
                    transaction_amount_rub=transaction.amount_rub,
                )

        persisted = False
        if new_transactions:
            try:
                self._store.append(new_transactions, existing=ledger)
                persisted = True
            except PersistenceError as e:
                self._logger.error(
                    "poll_ledger_save_failed",
                    error_type=type(e).__name__,
                    error_message=str(e),
                    poll_new_count=len(new_transactions),
                )

        self._logger.info(
            "poll_cycle_completed",
            poll_pages_ok=pages_ok,
            poll_pages_failed=pages_failed,
            poll_new_count=len(new_transactions),
            ledger_size=len(ledger) + (len(new_transactions) if persisted else 0),
        )
        return PollCycleResult(
            pages_ok=pages_ok,
            pages_failed=pages_failed,
            new_transactions=tuple(new_transactions),
            persisted=persisted,
        )
