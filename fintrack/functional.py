from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Mapping, TypeVar

from fintrack.domain import BudgetGoal, Transaction
from fintrack.periods import is_iso_date
from fintrack.transforms import label, new_transaction_id, to_money, to_type

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Either(Generic[E, T], ABC):
    """Result of a boundary check: ``Right`` carries a value, ``Left`` an error."""

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass

    def is_right(self) -> bool:
        return isinstance(self, Right)

    def is_left(self) -> bool:
        return isinstance(self, Left)


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return self

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def _invalid(error: str, message: str, **extra) -> Left:
    return Left({"error": error, "message": message, **extra})


def validate_transaction(draft: Mapping[str, Any], tx_id: str | None = None) -> Either[dict, Transaction]:
    """Check a form draft and build the ``Transaction`` it describes.

    ``tx_id`` keeps the identity of an edited transaction; a fresh id is
    assigned otherwise.
    """
    description = str(draft.get("description") or "").strip()
    if not description:
        return _invalid("missing_description", "Description is required")

    try:
        amount = to_money(draft.get("amount"))
    except ValueError:
        return _invalid("invalid_amount", "Amount must be a number", amount=draft.get("amount"))
    if amount <= 0:
        return _invalid("invalid_amount", "Amount must be greater than zero", amount=str(amount))

    try:
        tx_type = to_type(draft.get("type"))
    except ValueError:
        return _invalid("invalid_type", "Type must be INCOME or EXPENSE", type=draft.get("type"))

    day = draft.get("date")
    if not is_iso_date(day):
        return _invalid("invalid_date", "Date must be a valid YYYY-MM-DD date", date=day)

    category = draft.get("category")
    if not category or not label(category).strip():
        return _invalid("missing_category", "Category is required")

    payment = draft.get("payment_method")
    return Right(
        Transaction(
            id=tx_id or new_transaction_id(),
            description=description,
            amount=amount,
            type=tx_type,
            category=label(category).strip(),
            date=day,
            payment_method=label(payment) if payment else None,
        )
    )


def parse_budget_form(values: Mapping[str, Any]) -> tuple[BudgetGoal, ...]:
    """Turn category -> raw input pairs into goals, dropping blank or non-positive limits."""
    goals = []
    for category, raw in values.items():
        if raw is None or not str(raw).strip():
            continue
        try:
            limit = to_money(raw)
        except ValueError:
            continue
        if limit > 0:
            goals.append(BudgetGoal(category=label(category), limit=limit))
    return tuple(goals)
