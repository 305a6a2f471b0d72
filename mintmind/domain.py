from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Type, Union


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class ExpenseCategory(str, Enum):
    FOOD = "Food"
    TRAVEL = "Travel"
    SHOPPING = "Shopping"
    BILLS = "Bills"
    FUEL = "Fuel"
    ENTERTAINMENT = "Entertainment"
    MEDICAL = "Medical"
    OTHER = "Other"


class IncomeCategory(str, Enum):
    SALARY = "Salary"
    FREELANCE = "Freelance"
    GIFT = "Gift"
    REFUND = "Refund"  # reduces expenses, never counted as income
    INTEREST = "Interest"
    OTHER = "Other"


Category = Union[ExpenseCategory, IncomeCategory]


def category_enum_for(tx_type: TransactionType) -> Type[Enum]:
    if tx_type == TransactionType.EXPENSE:
        return ExpenseCategory
    return IncomeCategory


def parse_category(tx_type: TransactionType, value: str) -> Category:
    """Resolve a stored category name against the closed set for ``tx_type``.

    Raises ``ValueError`` for names outside that set.
    """
    return category_enum_for(tx_type)(value)


@dataclass(frozen=True)
class Transaction:
    id: str
    type: TransactionType
    amount: float         # always >= 0, sign comes from type
    category: Category
    date: datetime        # when it happened, user editable
    note: str = ""
    created_at: Optional[datetime] = None  # audit only

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    @property
    def is_refund(self) -> bool:
        return self.is_income and self.category == IncomeCategory.REFUND


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class UserProfile:
    monthly_income: float = 0.0
    monthly_expenses: float = 0.0
    travel_cost: float = 0.0
    food_snacks: float = 0.0
    random_expenses: float = 0.0
    sip_goal: float = 0.0
    risk_level: RiskLevel = RiskLevel.MEDIUM
    has_completed_onboarding: bool = False

    @property
    def monthly_surplus(self) -> float:
        return self.monthly_income - self.monthly_expenses

    @property
    def planned_savings(self) -> float:
        return max(0.0, self.monthly_surplus)


@dataclass(frozen=True)
class FinanceContext:
    """Everything a report calculator needs, passed explicitly."""

    transactions: tuple
    monthly_limit: float
    now: datetime


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


@dataclass(frozen=True)
class AppSettings:
    theme: Theme = Theme.LIGHT
    currency: str = "₹"
