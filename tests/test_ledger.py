from datetime import date, datetime

import pytest

from mintmind.budget import calculate_503020_budget
from mintmind.domain import ExpenseCategory, IncomeCategory, Transaction, TransactionType
from mintmind.ledger import (
    category_breakdown,
    daily_series,
    filter_by_date_range,
    remaining_budget,
    top_categories,
    total_by_type,
    transaction_summary,
)


def expense(tx_id, amount, category, when):
    return Transaction(tx_id, TransactionType.EXPENSE, amount, category, when)


def income(tx_id, amount, category, when):
    return Transaction(tx_id, TransactionType.INCOME, amount, category, when)


def test_filter_by_date_range_is_inclusive():
    start = datetime(2026, 10, 1)
    end = datetime(2026, 10, 31, 23, 59, 59)
    trans = (
        expense("t1", 10, ExpenseCategory.FOOD, start),
        expense("t2", 10, ExpenseCategory.FOOD, end),
        expense("t3", 10, ExpenseCategory.FOOD, datetime(2026, 11, 1)),
        expense("t4", 10, ExpenseCategory.FOOD, datetime(2026, 9, 30, 23, 59)),
    )
    result = filter_by_date_range(trans, start, end)
    assert [t.id for t in result] == ["t1", "t2"]


def test_total_by_type():
    trans = (
        income("i1", 500, IncomeCategory.SALARY, datetime(2026, 10, 1)),
        expense("e1", 120, ExpenseCategory.FOOD, datetime(2026, 10, 2)),
        expense("e2", 30, ExpenseCategory.TRAVEL, datetime(2026, 10, 3)),
    )
    assert total_by_type(trans, TransactionType.INCOME) == 500
    assert total_by_type(trans, TransactionType.EXPENSE) == 150
    assert total_by_type((), TransactionType.EXPENSE) == 0


def test_category_breakdown_sorted_and_sums_to_100():
    trans = (
        expense("e1", 100, ExpenseCategory.FOOD, datetime(2026, 10, 1)),
        expense("e2", 300, ExpenseCategory.SHOPPING, datetime(2026, 10, 1)),
        expense("e3", 50, ExpenseCategory.FOOD, datetime(2026, 10, 2)),
        expense("e4", 33, ExpenseCategory.BILLS, datetime(2026, 10, 2)),
        income("i1", 9999, IncomeCategory.SALARY, datetime(2026, 10, 1)),
    )
    rows = category_breakdown(trans, TransactionType.EXPENSE)
    assert [r.category for r in rows] == [
        ExpenseCategory.SHOPPING, ExpenseCategory.FOOD, ExpenseCategory.BILLS,
    ]
    assert rows[1].amount == 150
    assert sum(r.percentage for r in rows) == pytest.approx(100, abs=0.1)


def test_category_breakdown_empty_and_zero_total():
    assert category_breakdown((), TransactionType.EXPENSE) == []
    rows = category_breakdown(
        (expense("e1", 0, ExpenseCategory.FOOD, datetime(2026, 10, 1)),), TransactionType.EXPENSE
    )
    assert rows[0].percentage == 0


def test_category_breakdown_with_base_override():
    trans = (expense("e1", 50, ExpenseCategory.FOOD, datetime(2026, 10, 1)),)
    rows = category_breakdown(trans, TransactionType.EXPENSE, base=200)
    assert rows[0].percentage == 25
    assert category_breakdown(trans, TransactionType.EXPENSE, base=0)[0].percentage == 0


def test_daily_series_covers_last_days_oldest_first():
    trans = (
        expense("e1", 40, ExpenseCategory.FOOD, datetime(2026, 10, 19, 23, 30)),
        expense("e2", 60, ExpenseCategory.FOOD, datetime(2026, 10, 19, 8)),
        expense("e3", 25, ExpenseCategory.TRAVEL, datetime(2026, 10, 13, 0, 10)),
        expense("e4", 99, ExpenseCategory.TRAVEL, datetime(2026, 10, 12, 12)),
        income("i1", 500, IncomeCategory.SALARY, datetime(2026, 10, 19, 9)),
    )
    series = daily_series(trans, 7, today=date(2026, 10, 19))
    assert len(series) == 7
    assert series[0].date == "2026-10-13"
    assert series[0].amount == 25
    assert series[-1].date == "2026-10-19"
    assert series[-1].amount == 100
    assert all(d.amount == 0 for d in series[1:-1])


def test_remaining_budget_against_503020_plan():
    budget = calculate_503020_budget(50000)
    now = datetime(2026, 10, 19, 15)  # Monday; week starts Sunday 18th
    trans = (
        expense("e1", 2000, ExpenseCategory.FOOD, datetime(2026, 10, 19, 9)),
        expense("e2", 1000, ExpenseCategory.FOOD, datetime(2026, 10, 18, 9)),
        expense("e3", 500, ExpenseCategory.BILLS, datetime(2026, 10, 5, 9)),
        expense("e4", 700, ExpenseCategory.BILLS, datetime(2026, 9, 30, 9)),
    )
    remaining = remaining_budget(budget, trans, now)
    assert remaining.daily_spent == 2000
    assert remaining.weekly_spent == 3000
    assert remaining.monthly_spent == 3500
    assert remaining.daily_remaining < 0
    assert remaining.monthly_remaining == 40000 - 3500


def test_transaction_summary():
    trans = (
        income("i1", 1000, IncomeCategory.SALARY, datetime(2026, 10, 1)),
        expense("e1", 400, ExpenseCategory.FOOD, datetime(2026, 10, 2)),
        expense("e2", 999, ExpenseCategory.FOOD, datetime(2026, 11, 2)),
    )
    summary = transaction_summary(
        trans, datetime(2026, 10, 1), datetime(2026, 10, 31, 23, 59), today=date(2026, 10, 5)
    )
    assert summary.total_income == 1000
    assert summary.total_expenses == 400
    assert summary.balance == 600
    assert summary.category_breakdown[0].percentage == 100
    assert len(summary.daily_expenses) == 7


def test_top_categories_ignores_income():
    trans = (
        expense("e1", 300, ExpenseCategory.FOOD, datetime(2026, 10, 1)),
        expense("e2", 200, ExpenseCategory.TRAVEL, datetime(2026, 10, 2)),
        expense("e3", 700, ExpenseCategory.FOOD, datetime(2026, 10, 3)),
        income("i1", 5000, IncomeCategory.SALARY, datetime(2026, 10, 3)),
    )
    assert list(top_categories(trans, 1)) == [(ExpenseCategory.FOOD, 1000)]
    assert len(list(top_categories(trans, 10))) == 2
