from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


# Canonical labels. Transactions and budget goals store plain strings, so
# free-text categories still match budget goals by name.
class Category(str, Enum):
    FOOD = "Food"
    HOUSING = "Housing"
    TRANSPORT = "Transport"
    UTILITIES = "Utilities"
    SHOPPING = "Shopping"
    CLOTHING = "Clothing"
    ENTERTAINMENT = "Entertainment"
    HEALTH = "Health"
    EDUCATION = "Education"
    PETS = "Pets"
    GIFTS = "Gifts"
    TRAVEL = "Travel"
    SALARY = "Salary"
    INVESTMENT = "Investment"
    OTHER = "Other"


class PaymentMethod(str, Enum):
    PIX = "Pix"
    CREDIT = "Credit"
    DEBIT = "Debit"
    CASH = "Cash"
    MEAL_TICKET = "Meal Ticket"
    TRANSFER = "Transfer"
    OTHER = "Other"


# categories offered by the budget form
EXPENSE_CATEGORIES = tuple(
    c.value for c in Category if c not in (Category.SALARY, Category.INVESTMENT)
)

UNSPECIFIED_METHOD = "unspecified"

STATUS_EXCEEDED = "exceeded"
STATUS_WARNING = "warning"
STATUS_ON_TRACK = "on track"


@dataclass(frozen=True)
class Transaction:
    id: str
    description: str
    amount: Decimal             # never negative by contract, sign lives in type
    type: TransactionType
    category: str
    date: str                   # "YYYY-MM-DD"
    payment_method: Optional[str] = None

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.type == TransactionType.INCOME else -self.amount


# A monthly spending ceiling for one category
@dataclass(frozen=True)
class BudgetGoal:
    category: str
    limit: Decimal


@dataclass(frozen=True)
class PeriodTotals:
    total_income: Decimal
    total_expense: Decimal

    @property
    def period_result(self) -> Decimal:
        return self.total_income - self.total_expense


@dataclass(frozen=True)
class CategoryShare:
    category: str
    amount: Decimal
    share: float    # fraction of the period expense total, 0..1


@dataclass(frozen=True)
class PaymentMethodTotal:
    method: str
    amount: Decimal


@dataclass(frozen=True)
class ChartPoint:
    name: str
    value: Decimal


@dataclass(frozen=True)
class BudgetStatus:
    category: str
    limit: Decimal
    spent: Decimal
    percentage: float
    remaining: Decimal

    @property
    def status(self) -> str:
        if self.percentage >= 100:
            return STATUS_EXCEEDED
        if self.percentage >= 80:
            return STATUS_WARNING
        return STATUS_ON_TRACK

    @property
    def progress(self) -> float:
        """Percentage clamped to 0..100 for progress bars."""
        return max(0.0, min(self.percentage, 100.0))
