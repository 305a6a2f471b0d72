"""Trailing three-month spending statistics per expense category."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, Optional, Sequence

import numpy as np

from mintmind.domain import Category, ExpenseCategory, Transaction
from mintmind.ledger import by_category, expense_transactions, filter_by_date_range
from mintmind.periods import trailing_month_windows

WINDOW_MONTHS = 3
INCREASING_FACTOR = 1.1
DECREASING_FACTOR = 0.9


class Trend(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


@dataclass(frozen=True)
class PatternAnalysis:
    category: Category
    monthly_totals: Sequence[float]  # oldest first, current month last
    current_month_total: float
    three_month_average: float
    trend: Trend
    volatility: float
    recurring_expenses: int


def _category_expenses(trans: Iterable[Transaction], category: Category):
    return list(filter(by_category(category), expense_transactions(trans)))


def classify_trend(current: float, average: float) -> Trend:
    if current > INCREASING_FACTOR * average:
        return Trend.INCREASING
    if current < DECREASING_FACTOR * average:
        return Trend.DECREASING
    return Trend.STABLE


def recurring_expense_count(month_transactions: Iterable[Transaction], category: Category) -> int:
    """Distinct amounts that occur more than once in ``category`` this month."""

    counts = Counter(t.amount for t in _category_expenses(month_transactions, category))
    return sum(1 for n in counts.values() if n > 1)


def analyze_spending_pattern(
    trans: Iterable[Transaction],
    category: Category,
    now: Optional[datetime] = None,
) -> PatternAnalysis:
    trans = tuple(trans)
    windows = trailing_month_windows(now, WINDOW_MONTHS)
    expenses = _category_expenses(trans, category)

    totals = [
        float(sum((t.amount for t in filter_by_date_range(expenses, start, end)), 0.0))
        for start, end in windows
    ]
    average = float(np.mean(totals))
    current = totals[-1]

    return PatternAnalysis(
        category=category,
        monthly_totals=tuple(totals),
        current_month_total=current,
        three_month_average=average,
        trend=classify_trend(current, average),
        volatility=float(np.std(totals)),
        recurring_expenses=recurring_expense_count(
            filter_by_date_range(expenses, *windows[-1]), category
        ),
    )


def analyze_all_patterns(
    trans: Iterable[Transaction], now: Optional[datetime] = None
) -> Dict[ExpenseCategory, PatternAnalysis]:
    """Patterns for every expense category with spending in the window."""

    trans = tuple(trans)
    now = now if now is not None else datetime.now()
    windows = trailing_month_windows(now, WINDOW_MONTHS)
    start, end = windows[0][0], windows[-1][1]
    seen = {
        t.category
        for t in filter_by_date_range(trans, start, end)
        if t.is_expense
    }
    return {
        category: analyze_spending_pattern(trans, category, now)
        for category in ExpenseCategory
        if category in seen
    }
