from decimal import Decimal

import pytest

from fintrack.aggregation import (
    compute_budget_status,
    compute_category_breakdown,
    compute_comparison,
    compute_payment_method_breakdown,
    compute_period_totals,
    compute_real_balance,
    filter_by_period,
)
from fintrack.domain import BudgetGoal, PeriodTotals, Transaction, TransactionType

INCOME = TransactionType.INCOME
EXPENSE = TransactionType.EXPENSE


def make_tx(id, type, amount, category, date, method=None):
    return Transaction(
        id=id,
        description=f"tx {id}",
        amount=Decimal(str(amount)),
        type=type,
        category=category,
        date=date,
        payment_method=method,
    )


def scenario_transactions():
    return (
        make_tx("t1", EXPENSE, 100, "Food", "2024-06-01", "Pix"),
        make_tx("t2", EXPENSE, 50, "Food", "2024-06-15", "Credit"),
        make_tx("t3", INCOME, 1000, "Salary", "2024-06-01", "Transfer"),
    )


def test_scenario_a_period_totals_and_breakdown():
    period = filter_by_period(scenario_transactions(), "2024-06-01", "2024-06-30")
    totals = compute_period_totals(period)

    assert totals.total_income == 1000
    assert totals.total_expense == 150
    assert totals.period_result == 850

    breakdown = compute_category_breakdown(period)
    assert len(breakdown) == 1
    assert breakdown[0].category == "Food"
    assert breakdown[0].amount == 150
    assert breakdown[0].share == pytest.approx(1.0)


def test_scenario_b_budget_exceeded():
    status = compute_budget_status(
        [BudgetGoal("Food", Decimal("120"))], scenario_transactions(), "2024-06-20"
    )

    assert len(status) == 1
    entry = status[0]
    assert entry.spent == 150
    assert entry.percentage == pytest.approx(125.0)
    assert entry.remaining == Decimal("-30")
    assert entry.status == "exceeded"


def test_scenario_c_empty_transactions():
    period = filter_by_period((), "2024-01-01", "2024-12-31")
    totals = compute_period_totals(period)

    assert period == ()
    assert totals.total_income == 0
    assert totals.total_expense == 0
    assert totals.period_result == 0
    assert compute_real_balance((), "2024-06-20") == 0
    assert compute_category_breakdown(period) == ()
    assert compute_payment_method_breakdown(period) == ()
    assert compute_budget_status([BudgetGoal("Food", Decimal("10"))], (), "2024-06-20")[0].spent == 0


def test_scenario_d_provisioned_transaction():
    future = make_tx("f1", EXPENSE, 200, "Travel", "2024-07-01")
    trans = scenario_transactions() + (future,)

    assert compute_real_balance(trans, "2024-06-20") == 850
    july = filter_by_period(trans, "2024-06-01", "2024-07-31")
    assert future in july
    assert compute_period_totals(july).total_expense == 350


def test_real_balance_ignores_later_transactions():
    trans = scenario_transactions()
    before = compute_real_balance(trans, "2024-06-15")
    after = compute_real_balance(trans + (make_tx("x", INCOME, 999, "Other", "2024-06-16"),), "2024-06-15")

    assert before == after == 850


def test_real_balance_is_inclusive_of_today():
    trans = (make_tx("a", INCOME, 10, "Other", "2024-06-20"),)
    assert compute_real_balance(trans, "2024-06-20") == 10
    assert compute_real_balance(trans, "2024-06-19") == 0


def test_filter_by_period_is_bounded_subset_in_original_order():
    trans = (
        make_tx("a", EXPENSE, 1, "Food", "2024-05-31"),
        make_tx("b", EXPENSE, 1, "Food", "2024-06-30"),
        make_tx("c", EXPENSE, 1, "Food", "2024-06-01"),
        make_tx("d", EXPENSE, 1, "Food", "2024-07-01"),
    )
    period = filter_by_period(trans, "2024-06-01", "2024-06-30")

    assert [t.id for t in period] == ["b", "c"]
    assert all("2024-06-01" <= t.date <= "2024-06-30" for t in period)
    assert set(period) <= set(trans)


def test_filter_by_period_inverted_bounds_is_empty():
    assert filter_by_period(scenario_transactions(), "2024-06-30", "2024-06-01") == ()


def test_category_breakdown_shares_sum_to_one_and_sorted():
    trans = (
        make_tx("a", EXPENSE, "10.10", "Food", "2024-06-01"),
        make_tx("b", EXPENSE, "33.33", "Housing", "2024-06-02"),
        make_tx("c", EXPENSE, "7.77", "Pets", "2024-06-03"),
        make_tx("d", EXPENSE, "5", "Food", "2024-06-04"),
        make_tx("e", INCOME, "500", "Salary", "2024-06-04"),
    )
    breakdown = compute_category_breakdown(trans)

    assert [c.category for c in breakdown] == ["Housing", "Food", "Pets"]
    assert sum(c.share for c in breakdown) == pytest.approx(1.0)
    amounts = [c.amount for c in breakdown]
    assert all(x >= y for x, y in zip(amounts, amounts[1:]))


def test_category_breakdown_ties_keep_first_encountered_order():
    trans = (
        make_tx("a", EXPENSE, 20, "Pets", "2024-06-01"),
        make_tx("b", EXPENSE, 20, "Gifts", "2024-06-02"),
        make_tx("c", EXPENSE, 20, "Food", "2024-06-03"),
    )
    assert [c.category for c in compute_category_breakdown(trans)] == ["Pets", "Gifts", "Food"]


def test_category_breakdown_zero_total_gives_zero_shares():
    trans = (
        make_tx("a", EXPENSE, 0, "Food", "2024-06-01"),
        make_tx("b", EXPENSE, 0, "Pets", "2024-06-01"),
    )
    breakdown = compute_category_breakdown(trans)

    assert len(breakdown) == 2
    assert all(c.share == 0.0 for c in breakdown)


def test_category_breakdown_ignores_income_only_periods():
    trans = (make_tx("a", INCOME, 10, "Salary", "2024-06-01"),)
    assert compute_category_breakdown(trans) == ()


def test_payment_breakdown_unspecified_label_and_order():
    trans = (
        make_tx("a", EXPENSE, 10, "Food", "2024-06-01", None),
        make_tx("b", EXPENSE, 40, "Food", "2024-06-01", "Credit"),
        make_tx("c", EXPENSE, 15, "Food", "2024-06-01", ""),
        make_tx("d", INCOME, 99, "Salary", "2024-06-01", "Pix"),
    )
    breakdown = compute_payment_method_breakdown(trans)

    assert [(p.method, p.amount) for p in breakdown] == [("Credit", 40), ("unspecified", 25)]


def test_payment_breakdown_ties_keep_first_encountered_order():
    trans = (
        make_tx("a", EXPENSE, 5, "Food", "2024-06-01", "Pix"),
        make_tx("b", EXPENSE, 5, "Food", "2024-06-02", "Cash"),
        make_tx("c", EXPENSE, 5, "Food", "2024-06-03", None),
    )
    breakdown = compute_payment_method_breakdown(trans)

    assert [p.method for p in breakdown] == ["Pix", "Cash", "unspecified"]


def test_comparison_points():
    points = compute_comparison(PeriodTotals(Decimal("1000"), Decimal("150")))
    assert [(p.name, p.value) for p in points] == [("Income", 1000), ("Expense", 150)]


def test_budget_status_uses_month_of_today_not_period():
    trans = (
        make_tx("may", EXPENSE, 500, "Food", "2024-05-31"),
        make_tx("june", EXPENSE, 40, "Food", "2024-06-02"),
        make_tx("june_last_year", EXPENSE, 300, "Food", "2023-06-10"),
        make_tx("income", INCOME, 40, "Food", "2024-06-02"),
    )
    status = compute_budget_status([BudgetGoal("Food", Decimal("100"))], trans, "2024-06-20")

    assert status[0].spent == 40
    assert status[0].status == "on track"


def test_budget_classification_boundaries():
    trans = (
        make_tx("a", EXPENSE, 100, "Food", "2024-06-01"),
        make_tx("b", EXPENSE, 80, "Pets", "2024-06-01"),
        make_tx("c", EXPENSE, "79.99", "Gifts", "2024-06-01"),
    )
    budgets = [
        BudgetGoal("Gifts", Decimal("100")),
        BudgetGoal("Food", Decimal("100")),
        BudgetGoal("Pets", Decimal("100")),
    ]
    status = {s.category: s for s in compute_budget_status(budgets, trans, "2024-06-20")}

    assert status["Food"].percentage == pytest.approx(100.0)
    assert status["Food"].status == "exceeded"
    assert status["Pets"].status == "warning"
    assert status["Gifts"].status == "on track"


def test_budget_status_sorted_by_percentage_with_stable_ties():
    trans = (make_tx("a", EXPENSE, 50, "Food", "2024-06-01"),)
    budgets = [
        BudgetGoal("Pets", Decimal("100")),
        BudgetGoal("Gifts", Decimal("100")),
        BudgetGoal("Food", Decimal("100")),
    ]
    status = compute_budget_status(budgets, trans, "2024-06-20")

    assert [s.category for s in status] == ["Food", "Pets", "Gifts"]
    pcts = [s.percentage for s in status]
    assert all(x >= y for x, y in zip(pcts, pcts[1:]))


def test_budget_status_skips_non_positive_limits():
    trans = (make_tx("a", EXPENSE, 50, "Food", "2024-06-01"),)
    budgets = [BudgetGoal("Food", Decimal("0")), BudgetGoal("Pets", Decimal("-5"))]

    assert compute_budget_status(budgets, trans, "2024-06-20") == ()
    assert compute_budget_status([], trans, "2024-06-20") == ()


def test_engine_tolerates_negative_amounts():
    trans = (make_tx("a", EXPENSE, -10, "Food", "2024-06-01"),)

    assert compute_real_balance(trans, "2024-06-20") == 10
    assert compute_category_breakdown(trans)[0].share == pytest.approx(1.0)


def test_operations_are_idempotent_and_do_not_mutate_inputs():
    trans = list(scenario_transactions())
    snapshot = list(trans)
    budgets = [BudgetGoal("Food", Decimal("120"))]

    first = (
        compute_category_breakdown(trans),
        compute_payment_method_breakdown(trans),
        compute_budget_status(budgets, trans, "2024-06-20"),
        compute_real_balance(trans, "2024-06-20"),
    )
    second = (
        compute_category_breakdown(trans),
        compute_payment_method_breakdown(trans),
        compute_budget_status(budgets, trans, "2024-06-20"),
        compute_real_balance(trans, "2024-06-20"),
    )

    assert first == second
    assert trans == snapshot
