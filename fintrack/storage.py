"""Local persistence for the transaction log, budget goals and last-update stamp.

Data lives in a key-value store keyed by logical name. ``JsonFileStore``
keeps every key in one JSON document on disk; ``MemoryStore`` is a plain dict
for tests and throwaway sessions. ``StorageGateway`` converts between stored
JSON text and domain records and never lets a corrupt payload escape as an
exception: an unreadable payload loads as an empty collection, and a single
malformed record is logged and skipped while the rest still load.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Protocol, Tuple, TypeVar

from fintrack.domain import BudgetGoal, Transaction
from fintrack.logging_setup import get_logger
from fintrack.transforms import (
    budget_from_dict,
    budget_to_dict,
    transaction_from_dict,
    transaction_to_dict,
)

TRANSACTIONS_KEY = "fintrack_transactions"
BUDGETS_KEY = "fintrack_budgets"
UPDATE_KEY = "fintrack_last_update"

_logger = get_logger("fintrack.storage")

R = TypeVar("R")


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:  # pragma: no cover - interface
        ...

    def set(self, key: str, value: str) -> None:  # pragma: no cover - interface
        ...

    def clear(self, key: str) -> None:  # pragma: no cover - interface
        ...


class MemoryStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def clear(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """All keys in a single JSON object file; missing or corrupt files read as empty."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, OSError) as e:
            _logger.error("store_read_failed path=%s error=%s", self.path, e.__class__.__name__)
            return {}
        if not isinstance(data, dict):
            _logger.error("store_read_failed path=%s error=not_an_object", self.path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2, sort_keys=True)

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def clear(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)


class StorageGateway:

    def __init__(self, store: KeyValueStore):
        self.store = store

    def _load_records(self, key: str, parse: Callable[[dict], R]) -> Tuple[R, ...]:
        raw = self.store.get(key)
        if not raw:
            return ()
        try:
            payload = json.loads(raw)
        except ValueError as e:
            # json.JSONDecodeError is a ValueError
            _logger.error("load_failed key=%s error=%s: %s", key, e.__class__.__name__, e)
            return ()
        if not isinstance(payload, list):
            _logger.error("load_failed key=%s error=payload is not a list", key)
            return ()

        # bad records are skipped, the rest still load
        records = []
        for index, item in enumerate(payload):
            try:
                records.append(parse(item))
            except (ValueError, TypeError, AttributeError) as e:
                _logger.error(
                    "record_skipped key=%s index=%d error=%s: %s",
                    key, index, e.__class__.__name__, e,
                )
        return tuple(records)

    def _save_records(self, key: str, records: Iterable, dump: Callable) -> None:
        try:
            self.store.set(key, json.dumps([dump(r) for r in records], ensure_ascii=False))
        except (OSError, TypeError, ValueError) as e:
            _logger.error("save_failed key=%s error=%s: %s", key, e.__class__.__name__, e)

    def load_transactions(self) -> Tuple[Transaction, ...]:
        return self._load_records(TRANSACTIONS_KEY, transaction_from_dict)

    def save_transactions(self, transactions: Iterable[Transaction]) -> None:
        self._save_records(TRANSACTIONS_KEY, transactions, transaction_to_dict)

    def load_budgets(self) -> Tuple[BudgetGoal, ...]:
        return self._load_records(BUDGETS_KEY, budget_from_dict)

    def save_budgets(self, budgets: Iterable[BudgetGoal]) -> None:
        self._save_records(BUDGETS_KEY, budgets, budget_to_dict)

    def load_timestamp(self) -> Optional[str]:
        return self.store.get(UPDATE_KEY) or None

    def save_timestamp(self, value: str) -> None:
        try:
            self.store.set(UPDATE_KEY, value)
        except OSError as e:
            _logger.error("save_failed key=%s error=%s: %s", UPDATE_KEY, e.__class__.__name__, e)

    def clear(self) -> None:
        for key in (TRANSACTIONS_KEY, BUDGETS_KEY, UPDATE_KEY):
            self.store.clear(key)


def open_gateway(path: Path | str) -> StorageGateway:
    return StorageGateway(JsonFileStore(path))
