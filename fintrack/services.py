from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from fintrack.aggregation import (
    compute_budget_status,
    compute_category_breakdown,
    compute_comparison,
    compute_payment_method_breakdown,
    compute_period_totals,
    compute_real_balance,
    filter_by_period,
)
from fintrack.domain import (
    BudgetGoal,
    BudgetStatus,
    CategoryShare,
    ChartPoint,
    PaymentMethodTotal,
    PeriodTotals,
    Transaction,
)
from fintrack.periods import is_provisioned, sort_for_display


@dataclass(frozen=True)
class Dashboard:
    start_date: str
    end_date: str
    today: str
    transactions: tuple[Transaction, ...]      # period entries, newest first
    real_balance: Decimal
    totals: PeriodTotals
    category_breakdown: tuple[CategoryShare, ...]
    payment_breakdown: tuple[PaymentMethodTotal, ...]
    comparison: tuple[ChartPoint, ...]
    budget_status: tuple[BudgetStatus, ...]
    provisioned_ids: frozenset[str]
    has_budgets: bool

    @property
    def record_count(self) -> int:
        return len(self.transactions)


def build_dashboard(
    transactions: Iterable[Transaction],
    budgets: Iterable[BudgetGoal],
    start_date: str,
    end_date: str,
    today: str,
) -> Dashboard:
    """Compose every dashboard figure from one snapshot.

    Totals and breakdowns follow the chosen period. The real balance and the
    budget status ignore it: the first covers all history up to ``today``,
    the second the calendar month of ``today``.
    """
    transactions = tuple(transactions)
    budgets = tuple(budgets)
    period = filter_by_period(transactions, start_date, end_date)
    totals = compute_period_totals(period)

    return Dashboard(
        start_date=start_date,
        end_date=end_date,
        today=today,
        transactions=sort_for_display(period),
        real_balance=compute_real_balance(transactions, today),
        totals=totals,
        category_breakdown=compute_category_breakdown(period),
        payment_breakdown=compute_payment_method_breakdown(period),
        comparison=compute_comparison(totals),
        budget_status=compute_budget_status(budgets, transactions, today),
        provisioned_ids=frozenset(t.id for t in period if is_provisioned(t, today)),
        has_budgets=bool(budgets),
    )
