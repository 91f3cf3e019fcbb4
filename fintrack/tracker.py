from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, Tuple

from fintrack.domain import BudgetGoal, Transaction
from fintrack.functional import Either, Left, validate_transaction
from fintrack.logging_setup import get_logger
from fintrack.memo import cached_dashboard
from fintrack.periods import month_bounds, next_day, today_iso
from fintrack.services import Dashboard
from fintrack.storage import StorageGateway
from fintrack.transforms import (
    add_transaction,
    delete_transaction,
    replace_budgets,
    replace_transaction,
)

_logger = get_logger("fintrack.tracker")


class FinanceTracker:
    """Owns the current snapshot and the last-updated stamp.

    Every successful mutation is written through the gateway and followed by
    an explicit ``touch``. Aggregation never happens here; ``dashboard`` hands
    the snapshot to the memoized engine.
    """

    def __init__(self, gateway: StorageGateway):
        self.gateway = gateway
        self.transactions: Tuple[Transaction, ...] = gateway.load_transactions()
        self.budgets: Tuple[BudgetGoal, ...] = gateway.load_budgets()
        self.last_updated: Optional[str] = gateway.load_timestamp()
        _logger.info(
            "tracker_loaded transactions=%d budgets=%d",
            len(self.transactions),
            len(self.budgets),
        )

    def touch(self, now: Optional[datetime] = None) -> str:
        stamp = (now or datetime.now()).isoformat(timespec="seconds")
        self.last_updated = stamp
        self.gateway.save_timestamp(stamp)
        return stamp

    def find(self, tx_id: str) -> Optional[Transaction]:
        return next((t for t in self.transactions if t.id == tx_id), None)

    def save_transaction(
        self, draft: Mapping[str, Any], editing_id: Optional[str] = None
    ) -> Either[dict, Transaction]:
        """Create a transaction, or replace ``editing_id`` wholesale."""
        if editing_id is not None and self.find(editing_id) is None:
            return Left({
                "error": "transaction_not_found",
                "message": f"Transaction with ID {editing_id} does not exist",
                "transaction_id": editing_id,
            })

        result = validate_transaction(draft, tx_id=editing_id)
        if result.is_left():
            _logger.info("transaction_rejected error=%s", result.get_error()["error"])
            return result

        tx = result.get_or_else(None)
        if editing_id is None:
            self.transactions = add_transaction(self.transactions, tx)
        else:
            self.transactions = replace_transaction(self.transactions, tx)
        self.gateway.save_transactions(self.transactions)
        self.touch()
        return result

    def delete_transaction(self, tx_id: str) -> bool:
        remaining = delete_transaction(self.transactions, tx_id)
        if len(remaining) == len(self.transactions):
            return False
        self.transactions = remaining
        self.gateway.save_transactions(self.transactions)
        self.touch()
        return True

    def set_budgets(self, goals: Iterable[BudgetGoal]) -> Tuple[BudgetGoal, ...]:
        self.budgets = replace_budgets(goals)
        self.gateway.save_budgets(self.budgets)
        self.touch()
        return self.budgets

    def dashboard(
        self,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        today: Optional[str] = None,
    ) -> Dashboard:
        today = today or today_iso()
        default_start, default_end = month_bounds(today)
        return cached_dashboard(
            self.transactions,
            self.budgets,
            start_date or default_start,
            end_date or default_end,
            today,
        )

    @staticmethod
    def provision_date(today: Optional[str] = None) -> str:
        """Default date for a planned entry: tomorrow."""
        return next_day(today or today_iso())

