# -*- coding: utf-8 -*-
"""Transaction ledger file: a JSON array of transactions in insertion order."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog

from panel_relay.exceptions import StoreDecodeError
from panel_relay.models.transaction import Transaction
from panel_relay.persistence.repositories.interfaces.transaction_store import (
    ITransactionStore,
)
from panel_relay.persistence.repositories.json_file._io import read_json, write_json_atomic


class JsonFileTransactionStore(ITransactionStore):
    """ITransactionStore backed by one JSON file, rewritten wholesale on save."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._logger = structlog.get_logger(self.__class__.__name__)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[Transaction]:
        data: Any = read_json(self._path, default=None)
        if data is None:
            return []
        if not isinstance(data, list):
            raise StoreDecodeError(
                f"Expected a JSON array in {self._path}",
                path=str(self._path),
            )
        try:
            transactions = [Transaction.from_dict(item) for item in data]
        except (AttributeError, TypeError, ValueError) as e:
            raise StoreDecodeError(
                f"Invalid ledger entry in {self._path}: {e}",
                path=str(self._path),
                cause=e,
            ) from e
        self._logger.debug(
            "ledger_loaded",
            ledger_path=str(self._path),
            ledger_size=len(transactions),
        )
        return transactions

    def save(self, transactions: list[Transaction]) -> None:
        write_json_atomic(self._path, [tx.to_dict() for tx in transactions])
        self._logger.debug(
            "ledger_saved",
            ledger_path=str(self._path),
            ledger_size=len(transactions),
        )
