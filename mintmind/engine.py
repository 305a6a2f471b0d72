"""Month-level finance snapshot: true income, net expenses and burn rate.

Refunds are income-typed but are never counted as income. They are netted
against expenses instead, and net expenses are floored at zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Sequence

from mintmind.domain import Transaction, TransactionType
from mintmind.ledger import (
    CategoryBreakdown,
    category_breakdown,
    expense_transactions,
    filter_by_date_range,
    income_transactions,
)
from mintmind.periods import day_window, days_in_month, week_window


@dataclass(frozen=True)
class FinanceSnapshot:
    true_income: float
    total_refunds: float
    raw_expenses: float
    net_expenses: float
    remaining_budget: float
    burn_rate: float
    month_end_projection: float
    daily_spent: float
    weekly_spent: float
    category_breakdown: Sequence[CategoryBreakdown]
    day_of_month: int
    days_in_month: int


def total_refunds(trans: Iterable[Transaction]) -> float:
    return sum((t.amount for t in trans if t.is_refund), 0.0)


def true_income(trans: Iterable[Transaction]) -> float:
    return sum((t.amount for t in income_transactions(trans) if not t.is_refund), 0.0)


def raw_expenses(trans: Iterable[Transaction]) -> float:
    return sum((t.amount for t in expense_transactions(trans)), 0.0)


def net_expenses(trans: Iterable[Transaction]) -> float:
    trans = tuple(trans)
    return max(0.0, raw_expenses(trans) - total_refunds(trans))


def build_finance_snapshot(
    month_transactions: Iterable[Transaction], now: Optional[datetime] = None
) -> FinanceSnapshot:
    """Summarise one month of transactions as of ``now``.

    ``month_transactions`` must already be restricted to the reporting month.
    The burn rate divides by the calendar day of the month, not by the
    number of days that have transactions.
    """

    now = now if now is not None else datetime.now()
    trans = tuple(month_transactions)
    expenses = expense_transactions(trans)

    income = true_income(trans)
    refunds = total_refunds(trans)
    gross = raw_expenses(trans)
    net = max(0.0, gross - refunds)

    day_of_month = now.day
    month_days = days_in_month(now.date())
    burn_rate = round(net / max(1, day_of_month), 2)

    daily_spent = sum((t.amount for t in filter_by_date_range(expenses, *day_window(now))), 0.0)
    weekly_spent = sum((t.amount for t in filter_by_date_range(expenses, *week_window(now))), 0.0)

    return FinanceSnapshot(
        true_income=income,
        total_refunds=refunds,
        raw_expenses=gross,
        net_expenses=net,
        remaining_budget=income - net,
        burn_rate=burn_rate,
        month_end_projection=round(income - burn_rate * month_days, 2),
        daily_spent=daily_spent,
        weekly_spent=weekly_spent,
        category_breakdown=category_breakdown(trans, TransactionType.EXPENSE, base=net),
        day_of_month=day_of_month,
        days_in_month=month_days,
    )
