"""Abstract interface for the transaction ledger (JSON file, etc.)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from panel_relay.models.transaction import Transaction


class ITransactionStore(ABC):
    """Interface for the append-only, deduplicated transaction ledger."""

    @abstractmethod
    def load(self) -> list[Transaction]:
        """Return the full ledger in insertion order; empty list if nothing is stored.

        Raises:
            StoreDecodeError: If stored content exists but cannot be decoded.
            PersistenceError: If the storage cannot be read.
        """
        ...

    @abstractmethod
    def save(self, transactions: list[Transaction]) -> None:
        """Replace the stored ledger with transactions (whole rewrite).

        Raises:
            PersistenceError: If the storage cannot be written.
        """
        ...

    def append(
        self,
        new_transactions: list[Transaction],
        *,
        existing: list[Transaction] | None = None,
    ) -> list[Transaction]:
        """Extend the ledger with new_transactions and persist it.

        Ids already present in the ledger are dropped. Nothing is written when
        no transaction remains. Default impl loads (unless existing is given),
        extends and calls save().

        Returns:
            The transactions actually appended.
        """
        ledger = self.load() if existing is None else list(existing)
        known = {tx.transaction_id for tx in ledger}
        added: list[Transaction] = []
        for tx in new_transactions:
            if tx.transaction_id in known:
                continue
            known.add(tx.transaction_id)
            added.append(tx)
        if added:
            self.save(ledger + added)
        return added
