"""Period-aware aggregation over a transaction snapshot.

Every function here is pure: it reads the transactions and budget goals it is
given and returns fresh tuples of derived records. Nothing is cached and no
input is mutated, so the same snapshot may be aggregated from several views
at once.
"""
from collections import defaultdict
from decimal import Decimal
from functools import reduce
from typing import Iterable

from fintrack.domain import (
    BudgetGoal,
    BudgetStatus,
    CategoryShare,
    ChartPoint,
    PaymentMethodTotal,
    PeriodTotals,
    Transaction,
    TransactionType,
    UNSPECIFIED_METHOD,
)
from fintrack.periods import by_date_range, on_or_before, same_month
from fintrack.transforms import expense_transactions

ZERO = Decimal("0")


def _group_sum(trans: Iterable[Transaction], key) -> dict[str, Decimal]:
    # dicts keep insertion order, which later gives stable tie-breaks
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for t in trans:
        totals[key(t)] += t.amount
    return dict(totals)


def compute_real_balance(trans: Iterable[Transaction], today: str) -> Decimal:
    """Signed sum of every transaction dated on or before ``today``.

    Provisioned entries (dated after today) are left out: this is the money
    actually available, not a projection.
    """
    return reduce(
        lambda acc, t: acc + t.signed_amount,
        filter(on_or_before(today), trans),
        ZERO,
    )


def filter_by_period(
    trans: Iterable[Transaction], start_date: str, end_date: str
) -> tuple[Transaction, ...]:
    return tuple(filter(by_date_range(start_date, end_date), trans))


def compute_period_totals(filtered: Iterable[Transaction]) -> PeriodTotals:
    income = ZERO
    expense = ZERO
    for t in filtered:
        if t.type == TransactionType.INCOME:
            income += t.amount
        else:
            expense += t.amount
    return PeriodTotals(total_income=income, total_expense=expense)


def compute_category_breakdown(
    filtered: Iterable[Transaction],
) -> tuple[CategoryShare, ...]:
    totals = _group_sum(expense_transactions(filtered), lambda t: t.category)
    total_expense = sum(totals.values(), ZERO)

    shares = (
        CategoryShare(
            category=category,
            amount=amount,
            share=float(amount / total_expense) if total_expense != 0 else 0.0,
        )
        for category, amount in totals.items()
    )
    return tuple(sorted(shares, key=lambda item: item.amount, reverse=True))


def compute_payment_method_breakdown(
    filtered: Iterable[Transaction],
) -> tuple[PaymentMethodTotal, ...]:
    totals = _group_sum(
        expense_transactions(filtered), lambda t: t.payment_method or UNSPECIFIED_METHOD
    )
    ordered = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return tuple(PaymentMethodTotal(method=m, amount=a) for m, a in ordered)


def compute_comparison(totals: PeriodTotals) -> tuple[ChartPoint, ...]:
    return (
        ChartPoint(name="Income", value=totals.total_income),
        ChartPoint(name="Expense", value=totals.total_expense),
    )


def compute_budget_status(
    budgets: Iterable[BudgetGoal], trans: Iterable[Transaction], today: str
) -> tuple[BudgetStatus, ...]:
    """Spending of the calendar month containing ``today`` against each goal.

    The month always comes from ``today``, never from a dashboard period.
    Goals with a limit of zero or less have no meaningful ceiling and are
    skipped. Results are ordered by percentage, most consumed first.
    """
    month_expenses = (t for t in expense_transactions(trans) if same_month(t.date, today))
    spent_by_category = _group_sum(month_expenses, lambda t: t.category)

    statuses = []
    for goal in budgets:
        if goal.limit <= 0:
            continue
        spent = spent_by_category.get(goal.category, ZERO)
        statuses.append(
            BudgetStatus(
                category=goal.category,
                limit=goal.limit,
                spent=spent,
                percentage=float(spent / goal.limit * 100),
                remaining=goal.limit - spent,
            )
        )
    return tuple(sorted(statuses, key=lambda s: s.percentage, reverse=True))
