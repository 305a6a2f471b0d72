"""Filtering and summing over a flat transaction collection."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from mintmind.budget import BudgetBreakdown
from mintmind.domain import Category, Transaction, TransactionType
from mintmind.periods import day_window, month_window, week_window


@dataclass(frozen=True)
class CategoryBreakdown:
    category: Category
    amount: float
    percentage: float


@dataclass(frozen=True)
class DailyExpense:
    date: str  # YYYY-MM-DD, local calendar date
    amount: float


@dataclass(frozen=True)
class TransactionSummary:
    total_income: float
    total_expenses: float
    balance: float
    category_breakdown: Sequence[CategoryBreakdown]
    daily_expenses: Sequence[DailyExpense]


@dataclass(frozen=True)
class RemainingBudget:
    daily_spent: float
    weekly_spent: float
    monthly_spent: float
    daily_remaining: float
    weekly_remaining: float
    monthly_remaining: float


def by_type(tx_type: TransactionType):
    def _filter(t: Transaction) -> bool:
        return t.type == tx_type

    return _filter


def by_category(category: Category):
    def _filter(t: Transaction) -> bool:
        return t.category == category

    return _filter


def by_date_range(start: datetime, end: datetime):
    def _filter(t: Transaction) -> bool:
        return start <= t.date <= end

    return _filter


def iter_transactions(
    trans: Iterable[Transaction], pred: Callable[[Transaction], bool]
) -> Iterator[Transaction]:
    for t in trans:
        if pred(t):
            yield t


def filter_by_date_range(
    trans: Iterable[Transaction], start: datetime, end: datetime
) -> Tuple[Transaction, ...]:
    """Transactions with ``start <= date <= end`` (both inclusive)."""

    return tuple(iter_transactions(trans, by_date_range(start, end)))


def income_transactions(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    return tuple(filter(by_type(TransactionType.INCOME), trans))


def expense_transactions(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    return tuple(filter(by_type(TransactionType.EXPENSE), trans))


def total_by_type(trans: Iterable[Transaction], tx_type: TransactionType) -> float:
    return sum((t.amount for t in trans if t.type == tx_type), 0.0)


def category_breakdown(
    trans: Iterable[Transaction],
    tx_type: TransactionType,
    base: Optional[float] = None,
) -> List[CategoryBreakdown]:
    """Per-category totals for ``tx_type``, largest first.

    Percentages are relative to the subset's own total unless ``base`` is
    given. A zero base yields 0% everywhere instead of dividing by zero.
    """

    filtered = [t for t in trans if t.type == tx_type]
    total = sum((t.amount for t in filtered), 0.0) if base is None else base

    totals: Dict[Category, float] = defaultdict(float)
    for t in filtered:
        totals[t.category] += t.amount

    rows = [
        CategoryBreakdown(
            category=category,
            amount=amount,
            percentage=(amount / total * 100) if total > 0 else 0.0,
        )
        for category, amount in totals.items()
    ]
    rows.sort(key=lambda row: row.amount, reverse=True)
    return rows


def daily_series(
    trans: Iterable[Transaction], days: int = 7, today: Optional[date] = None
) -> List[DailyExpense]:
    """Expense totals for each of the last ``days`` days, oldest first."""

    today = today or date.today()
    daily: Dict[str, float] = defaultdict(float)
    for t in trans:
        if t.type == TransactionType.EXPENSE:
            daily[t.date.date().isoformat()] += t.amount

    series = []
    for offset in range(days - 1, -1, -1):
        key = (today - timedelta(days=offset)).isoformat()
        series.append(DailyExpense(date=key, amount=daily.get(key, 0.0)))
    return series


def monthly_transactions(
    trans: Iterable[Transaction], now: Optional[datetime] = None
) -> Tuple[Transaction, ...]:
    return filter_by_date_range(trans, *month_window(now))


def weekly_transactions(
    trans: Iterable[Transaction], now: Optional[datetime] = None
) -> Tuple[Transaction, ...]:
    return filter_by_date_range(trans, *week_window(now))


def today_transactions(
    trans: Iterable[Transaction], now: Optional[datetime] = None
) -> Tuple[Transaction, ...]:
    return filter_by_date_range(trans, *day_window(now))


def transaction_summary(
    trans: Iterable[Transaction],
    start: datetime,
    end: datetime,
    today: Optional[date] = None,
) -> TransactionSummary:
    filtered = filter_by_date_range(trans, start, end)
    income = total_by_type(filtered, TransactionType.INCOME)
    expenses = total_by_type(filtered, TransactionType.EXPENSE)
    return TransactionSummary(
        total_income=income,
        total_expenses=expenses,
        balance=income - expenses,
        category_breakdown=category_breakdown(filtered, TransactionType.EXPENSE),
        daily_expenses=daily_series(filtered, 7, today),
    )


def remaining_budget(
    budget: BudgetBreakdown,
    trans: Iterable[Transaction],
    now: Optional[datetime] = None,
) -> RemainingBudget:
    trans = tuple(trans)
    daily = total_by_type(today_transactions(trans, now), TransactionType.EXPENSE)
    weekly = total_by_type(weekly_transactions(trans, now), TransactionType.EXPENSE)
    monthly = total_by_type(monthly_transactions(trans, now), TransactionType.EXPENSE)
    return RemainingBudget(
        daily_spent=daily,
        weekly_spent=weekly,
        monthly_spent=monthly,
        daily_remaining=budget.daily_limit - daily,
        weekly_remaining=budget.weekly_limit - weekly,
        monthly_remaining=budget.monthly_limit - monthly,
    )


def top_categories(trans: Iterable[Transaction], k: int) -> Iterator[Tuple[Category, float]]:
    """Lazily yield the ``k`` largest expense categories with their totals."""

    totals: Dict[Category, float] = defaultdict(float)
    for t in trans:
        if t.type == TransactionType.EXPENSE:
            totals[t.category] += t.amount

    ordered = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    for category, total in ordered[: max(0, k)]:
        yield category, total
