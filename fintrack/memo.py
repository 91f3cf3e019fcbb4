from functools import lru_cache

from fintrack.domain import BudgetGoal, Transaction
from fintrack.services import Dashboard, build_dashboard


# Snapshots are tuples of frozen dataclasses, so they hash by value and a
# cached entry is only reused for an identical snapshot and period.
@lru_cache(maxsize=64)
def cached_dashboard(
    transactions: tuple[Transaction, ...],
    budgets: tuple[BudgetGoal, ...],
    start_date: str,
    end_date: str,
    today: str,
) -> Dashboard:
    return build_dashboard(transactions, budgets, start_date, end_date, today)
