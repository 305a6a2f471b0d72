"""Needs/wants/savings budget split and the spending limits derived from it."""

import math
from dataclasses import dataclass

WEEKS_PER_MONTH = 4.33
DAYS_PER_MONTH = 30


def round_half_up(value: float) -> int:
    """Currency rounding where .5 always goes up, unlike ``round``."""
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class BudgetBreakdown:
    needs: int
    wants: int
    savings: int
    daily_limit: int
    weekly_limit: int
    monthly_limit: int  # needs + wants, the overspend threshold


def calculate_custom_budget(
    monthly_income: float,
    needs_percent: float,
    wants_percent: float,
    savings_percent: float,
) -> BudgetBreakdown:
    needs = monthly_income * needs_percent / 100
    wants = monthly_income * wants_percent / 100
    savings = monthly_income * savings_percent / 100

    # limits come from the unrounded shares
    monthly_limit = needs + wants
    return BudgetBreakdown(
        needs=round_half_up(needs),
        wants=round_half_up(wants),
        savings=round_half_up(savings),
        daily_limit=round_half_up(monthly_limit / DAYS_PER_MONTH),
        weekly_limit=round_half_up(monthly_limit / WEEKS_PER_MONTH),
        monthly_limit=round_half_up(monthly_limit),
    )


def calculate_503020_budget(monthly_income: float) -> BudgetBreakdown:
    return calculate_custom_budget(monthly_income, 50, 30, 20)


def calculate_emergency_fund(monthly_expenses: float) -> int:
    # six months of expenses
    return round_half_up(monthly_expenses * 6)
