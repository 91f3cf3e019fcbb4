from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Iterable, Mapping, Tuple
from uuid import uuid4

from fintrack.domain import BudgetGoal, Transaction, TransactionType

CENTS = Decimal("0.01")


def to_money(raw: Any) -> Decimal:
    """Parse a two-decimal monetary value from a number or a string."""
    if raw is None or isinstance(raw, bool):
        raise ValueError(f"invalid amount: {raw!r}")
    try:
        value = Decimal(str(raw).strip().replace(",", "."))
        if not value.is_finite():
            raise ValueError(f"invalid amount: {raw!r}")
        return value.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"invalid amount: {raw!r}") from e


def money_str(value: Decimal) -> str:
    return f"{Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP):.2f}"


def label(raw: Any) -> str:
    """Plain string form of a canonical enum label or free text."""
    return raw.value if isinstance(raw, Enum) else str(raw)


def to_type(raw: Any) -> TransactionType:
    if isinstance(raw, TransactionType):
        return raw
    try:
        return TransactionType(str(raw).strip().upper())
    except ValueError as e:
        raise ValueError(f"invalid transaction type: {raw!r}") from e


def transaction_from_dict(data: Mapping[str, Any]) -> Transaction:
    try:
        payment = data.get("payment_method", data.get("paymentMethod"))
        return Transaction(
            id=str(data["id"]),
            description=str(data.get("description", "")),
            amount=to_money(data["amount"]),
            type=to_type(data["type"]),
            category=label(data["category"]),
            date=str(data["date"]),
            payment_method=label(payment) if payment else None,
        )
    except KeyError as e:
        raise ValueError(f"transaction record missing field {e}") from e


def transaction_to_dict(t: Transaction) -> dict:
    return {
        "id": t.id,
        "description": t.description,
        "amount": money_str(t.amount),
        "type": t.type.value,
        "category": t.category,
        "payment_method": t.payment_method,
        "date": t.date,
    }


def budget_from_dict(data: Mapping[str, Any]) -> BudgetGoal:
    try:
        return BudgetGoal(category=label(data["category"]), limit=to_money(data["limit"]))
    except KeyError as e:
        raise ValueError(f"budget record missing field {e}") from e


def budget_to_dict(b: BudgetGoal) -> dict:
    return {"category": b.category, "limit": money_str(b.limit)}


def new_transaction_id() -> str:
    return uuid4().hex


def add_transaction(
    trans: Tuple[Transaction, ...], t: Transaction
) -> Tuple[Transaction, ...]:
    return trans + (t,)


def replace_transaction(
    trans: Tuple[Transaction, ...], t: Transaction
) -> Tuple[Transaction, ...]:
    return tuple(t if old.id == t.id else old for old in trans)


def delete_transaction(
    trans: Tuple[Transaction, ...], tx_id: str
) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.id != tx_id, trans))


def replace_budgets(goals: Iterable[BudgetGoal]) -> Tuple[BudgetGoal, ...]:
    """Normalize a full budget set: one goal per category, positive limits only.

    A later goal for the same category wins but keeps the first position.
    """
    by_category: dict[str, BudgetGoal] = {}
    for g in goals:
        by_category[g.category] = g
    return tuple(g for g in by_category.values() if g.limit > 0)


def with_labels(options: Iterable[Any], extra: Iterable[Any]) -> list[str]:
    """Canonical labels followed by any free-text labels not already listed."""
    labels = [label(o) for o in options]
    for raw in extra:
        if raw and label(raw) not in labels:
            labels.append(label(raw))
    return labels


def expense_transactions(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.type == TransactionType.EXPENSE, trans))
