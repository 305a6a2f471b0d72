from datetime import datetime

import pytest

from mintmind.domain import ExpenseCategory, IncomeCategory, Transaction, TransactionType
from mintmind.patterns import Trend, analyze_all_patterns, analyze_spending_pattern, classify_trend

NOW = datetime(2026, 10, 19, 12)


def expense(tx_id, amount, category, when):
    return Transaction(tx_id, TransactionType.EXPENSE, amount, category, when)


def three_months(category, aug, sep, oct_):
    return (
        expense("a", aug, category, datetime(2026, 8, 10)),
        expense("s", sep, category, datetime(2026, 9, 10)),
        expense("o", oct_, category, datetime(2026, 10, 10)),
    )


def test_increasing_trend_and_volatility():
    trans = three_months(ExpenseCategory.FOOD, 3000, 3000, 6000)
    p = analyze_spending_pattern(trans, ExpenseCategory.FOOD, NOW)
    assert p.monthly_totals == (3000, 3000, 6000)
    assert p.current_month_total == 6000
    assert p.three_month_average == 4000
    assert p.trend == Trend.INCREASING
    assert p.volatility == pytest.approx(1414.2136, abs=1e-3)


def test_decreasing_trend():
    trans = three_months(ExpenseCategory.FOOD, 6000, 6000, 0)
    p = analyze_spending_pattern(trans, ExpenseCategory.FOOD, NOW)
    assert p.current_month_total == 0
    assert p.trend == Trend.DECREASING


def test_stable_trend_has_no_volatility():
    trans = three_months(ExpenseCategory.BILLS, 1000, 1000, 1000)
    p = analyze_spending_pattern(trans, ExpenseCategory.BILLS, NOW)
    assert p.trend == Trend.STABLE
    assert p.volatility == 0


def test_category_without_spending_is_stable_and_zero():
    p = analyze_spending_pattern((), ExpenseCategory.MEDICAL, NOW)
    assert p.monthly_totals == (0, 0, 0)
    assert p.three_month_average == 0
    assert p.trend == Trend.STABLE
    assert p.recurring_expenses == 0


def test_spending_outside_window_is_ignored():
    trans = (
        expense("old", 9999, ExpenseCategory.FOOD, datetime(2026, 7, 31, 23, 59)),
        expense("new", 300, ExpenseCategory.FOOD, datetime(2026, 10, 1)),
    )
    p = analyze_spending_pattern(trans, ExpenseCategory.FOOD, NOW)
    assert p.monthly_totals == (0, 0, 300)


def test_recurring_counts_repeated_amounts_this_month():
    dates = [datetime(2026, 10, d) for d in (1, 3, 5, 7, 9)]
    amounts = [499, 499, 199, 199, 50]
    trans = tuple(
        expense(f"e{i}", amount, ExpenseCategory.ENTERTAINMENT, when)
        for i, (amount, when) in enumerate(zip(amounts, dates))
    ) + (expense("sep", 50, ExpenseCategory.ENTERTAINMENT, datetime(2026, 9, 9)),)
    p = analyze_spending_pattern(trans, ExpenseCategory.ENTERTAINMENT, NOW)
    assert p.recurring_expenses == 2


def test_income_is_not_a_pattern():
    trans = (
        Transaction("i1", TransactionType.INCOME, 5000, IncomeCategory.SALARY, datetime(2026, 10, 1)),
        expense("e1", 100, ExpenseCategory.TRAVEL, datetime(2026, 9, 1)),
    )
    patterns = analyze_all_patterns(trans, NOW)
    assert set(patterns) == {ExpenseCategory.TRAVEL}


@pytest.mark.parametrize("current, average, expected", [
    (111, 100, Trend.INCREASING),
    (110, 100, Trend.STABLE),
    (90, 100, Trend.STABLE),
    (89, 100, Trend.DECREASING),
    (0, 0, Trend.STABLE),
])
def test_classify_trend_thresholds(current, average, expected):
    assert classify_trend(current, average) == expected


def test_pattern_analysis_is_idempotent():
    trans = three_months(ExpenseCategory.FOOD, 3000, 3000, 6000)
    first = analyze_spending_pattern(trans, ExpenseCategory.FOOD, NOW)
    assert analyze_spending_pattern(trans, ExpenseCategory.FOOD, NOW) == first
