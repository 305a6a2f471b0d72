"""Per-transaction behavioural signals for expenses.

The drift and month-end impact use the active-day burn rate (net expenses /
days that have any transaction). The breach alert uses the calendar-day burn
rate, matching the dashboard projection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple

from mintmind.budget import round_half_up
from mintmind.domain import Category, ExpenseCategory, Transaction, TransactionType
from mintmind.engine import net_expenses, true_income as compute_true_income
from mintmind.functional import Maybe, safe_transaction
from mintmind.patterns import recurring_expense_count
from mintmind.periods import days_in_month

logger = logging.getLogger(__name__)

NON_ESSENTIAL = frozenset({
    ExpenseCategory.ENTERTAINMENT,
    ExpenseCategory.SHOPPING,
    ExpenseCategory.FUEL,
})
CATEGORY_SHARE = 0.25       # share of the monthly limit assumed per category
CRITICAL_USAGE = 90.0
WARNING_USAGE = 70.0
MOMENT_THRESHOLD = 20.0     # percent above/below the category average
BREACH_MARGIN = 1.05
NEUTRAL_SAVINGS_INDEX = 5.0


class CategoryHealth(str, Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class TransactionInsight:
    transaction_id: str
    savings_opportunity: float
    burn_rate_drift: float
    month_end_impact: float
    category_health: CategoryHealth
    should_skip: bool
    savings_index: float
    moment_analysis: str
    predictive_alert: Optional[str] = None
    warning_message: Optional[str] = None


def active_days(trans: Iterable[Transaction]) -> int:
    return len({t.date.date() for t in trans})


def accurate_burn_rate(trans: Iterable[Transaction]) -> float:
    """Net expenses per day that has at least one transaction."""
    trans = tuple(trans)
    return net_expenses(trans) / max(1, active_days(trans))


def category_allocation(monthly_limit: float) -> float:
    return monthly_limit * CATEGORY_SHARE


def category_usage(spent: float, monthly_limit: float) -> float:
    """Percent of the category allocation consumed.

    With no allocation any spending counts as fully consumed.
    """
    allocation = category_allocation(monthly_limit)
    if allocation <= 0:
        return 100.0 if spent > 0 else 0.0
    return spent / allocation * 100


def classify_health(usage_percent: float) -> CategoryHealth:
    if usage_percent > CRITICAL_USAGE:
        return CategoryHealth.CRITICAL
    if usage_percent > WARNING_USAGE:
        return CategoryHealth.WARNING
    return CategoryHealth.HEALTHY


def category_spent(trans: Iterable[Transaction], category: Category) -> float:
    return sum(
        (t.amount for t in trans if t.type == TransactionType.EXPENSE and t.category == category),
        0.0,
    )


def category_daily_average(trans: Iterable[Transaction], category: Category) -> float:
    """Category spend divided by the days that have spending in it."""
    expenses = [t for t in trans if t.type == TransactionType.EXPENSE and t.category == category]
    if not expenses:
        return 0.0
    return sum(t.amount for t in expenses) / max(1, active_days(expenses))


def _moment_analysis(category: Category, average: float, percent_above: float) -> str:
    name = getattr(category, "value", category)
    if average <= 0:
        return f"No {name} spending to compare against yet"
    if percent_above > MOMENT_THRESHOLD:
        return f"{percent_above:.0f}% above your average {name} spend of {average:,.0f} per active day"
    if percent_above < -MOMENT_THRESHOLD:
        return f"{-percent_above:.0f}% below your average {name} spend of {average:,.0f} per active day"
    return f"In line with your average {name} spend of {average:,.0f} per active day"


def _warning_message(category: Category, health: CategoryHealth, usage: float) -> Optional[str]:
    name = getattr(category, "value", category)
    if health == CategoryHealth.CRITICAL:
        return f"{name} budget nearly exhausted: {usage:.0f}% of its allocation used"
    if health == CategoryHealth.WARNING:
        return f"{name} has used {usage:.0f}% of its allocation"
    return None


def _predictive_alert(
    trans: Tuple[Transaction, ...],
    monthly_limit: float,
    true_income: float,
    now: datetime,
) -> Optional[str]:
    burn_rate = net_expenses(trans) / max(1, now.day)
    projected = burn_rate * days_in_month(now.date())
    if projected <= monthly_limit * BREACH_MARGIN:
        return None
    return (
        f"At {burn_rate:,.2f}/day you are on track to spend {projected:,.0f} this month, "
        f"{projected - monthly_limit:,.0f} over your {monthly_limit:,.0f} limit "
        f"(projected balance {true_income - projected:,.0f})"
    )


def _neutral_insight(t: Transaction) -> TransactionInsight:
    return TransactionInsight(
        transaction_id=t.id,
        savings_opportunity=0.0,
        burn_rate_drift=0.0,
        month_end_impact=t.amount,
        category_health=CategoryHealth.HEALTHY,
        should_skip=False,
        savings_index=NEUTRAL_SAVINGS_INDEX,
        moment_analysis="",
    )


def generate_transaction_insight(
    target: Transaction,
    month_transactions: Iterable[Transaction],
    monthly_limit: float,
    true_income: float,
    now: Optional[datetime] = None,
) -> TransactionInsight:
    if monthly_limit < 0:
        raise ValueError(f"monthly_limit must be >= 0, got {monthly_limit}")
    if target.type == TransactionType.INCOME:
        return _neutral_insight(target)

    now = now if now is not None else datetime.now()
    without = tuple(t for t in month_transactions if t.id != target.id)
    with_target = without + (target,)

    rate_with = accurate_burn_rate(with_target)
    rate_without = accurate_burn_rate(without)

    remaining_days = max(0, days_in_month(now.date()) - now.day)
    projected_with = net_expenses(with_target) + rate_with * remaining_days
    projected_without = net_expenses(without) + rate_without * remaining_days

    usage = category_usage(category_spent(with_target, target.category), monthly_limit)
    health = classify_health(usage)
    recurring = recurring_expense_count(with_target, target.category)

    average = category_daily_average(with_target, target.category)
    percent_above = (target.amount - average) / average * 100 if average > 0 else 0.0
    savings_index = min(10.0, max(1.0, NEUTRAL_SAVINGS_INDEX + percent_above / 100 * 5))

    insight = TransactionInsight(
        transaction_id=target.id,
        savings_opportunity=round(max(0.0, target.amount - average), 2),
        burn_rate_drift=round(rate_with - rate_without, 2),
        month_end_impact=float(round_half_up(projected_without - projected_with)),
        category_health=health,
        should_skip=(
            target.category in NON_ESSENTIAL
            and health == CategoryHealth.CRITICAL
            and recurring == 0
        ),
        savings_index=round(savings_index, 1),
        moment_analysis=_moment_analysis(target.category, average, percent_above),
        predictive_alert=_predictive_alert(with_target, monthly_limit, true_income, now),
        warning_message=_warning_message(target.category, health, usage),
    )
    logger.debug("insight for %s: health=%s skip=%s", target.id, health.value, insight.should_skip)
    return insight


def generate_month_insights(
    month_transactions: Iterable[Transaction],
    monthly_limit: float,
    now: Optional[datetime] = None,
) -> Dict[str, TransactionInsight]:
    trans = tuple(month_transactions)
    income = compute_true_income(trans)
    return {
        t.id: generate_transaction_insight(t, trans, monthly_limit, income, now)
        for t in trans
    }


def insight_for(
    transaction_id: str,
    month_transactions: Iterable[Transaction],
    monthly_limit: float,
    now: Optional[datetime] = None,
) -> Maybe[TransactionInsight]:
    trans = tuple(month_transactions)
    income = compute_true_income(trans)
    return safe_transaction(trans, transaction_id).map(
        lambda t: generate_transaction_insight(t, trans, monthly_limit, income, now)
    )
