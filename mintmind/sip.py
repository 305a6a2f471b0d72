from dataclasses import dataclass
from typing import Sequence

from mintmind.budget import round_half_up
from mintmind.domain import RiskLevel

RISK_MULTIPLIERS = {
    RiskLevel.LOW: 0.2,
    RiskLevel.MEDIUM: 0.35,
    RiskLevel.HIGH: 0.5,
}


@dataclass(frozen=True)
class YearlyValue:
    year: int
    invested: int
    returns: int
    total: int


@dataclass(frozen=True)
class SIPCalculation:
    monthly_investment: float
    expected_return: float
    years: int
    total_invested: int
    total_returns: int
    final_value: int
    yearly_breakdown: Sequence[YearlyValue]


def sip_future_value(monthly_investment: float, monthly_rate: float, months: int) -> float:
    """Future value of an annuity-due: each instalment compounds for its own month."""
    if monthly_rate == 0:
        return monthly_investment * months
    growth = (1 + monthly_rate) ** months
    return monthly_investment * ((growth - 1) / monthly_rate) * (1 + monthly_rate)


def calculate_sip(monthly_investment: float, expected_return_percent: float, years: int) -> SIPCalculation:
    monthly_rate = expected_return_percent / 100 / 12
    months = years * 12

    future_value = sip_future_value(monthly_investment, monthly_rate, months)
    total_invested = monthly_investment * months

    breakdown = []
    for year in range(1, years + 1):
        value = sip_future_value(monthly_investment, monthly_rate, year * 12)
        invested = monthly_investment * year * 12
        breakdown.append(YearlyValue(
            year=year,
            invested=round_half_up(invested),
            returns=round_half_up(value - invested),
            total=round_half_up(value),
        ))

    return SIPCalculation(
        monthly_investment=monthly_investment,
        expected_return=expected_return_percent,
        years=years,
        total_invested=round_half_up(total_invested),
        total_returns=round_half_up(future_value - total_invested),
        final_value=round_half_up(future_value),
        yearly_breakdown=tuple(breakdown),
    )


def calculate_recommended_sip(monthly_income: float, monthly_expenses: float, risk_level: RiskLevel) -> int:
    surplus = monthly_income - monthly_expenses
    if surplus <= 0:
        return 0
    return round_half_up(surplus * RISK_MULTIPLIERS[RiskLevel(risk_level)])


def calculate_target_sip(target_amount: float, years: int, expected_return_percent: float) -> int:
    """Monthly instalment needed to reach ``target_amount`` in ``years``."""
    months = years * 12
    if months <= 0:
        return 0
    monthly_rate = expected_return_percent / 100 / 12
    per_unit = sip_future_value(1, monthly_rate, months)
    return round_half_up(target_amount / per_unit)
