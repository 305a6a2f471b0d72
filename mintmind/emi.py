from dataclasses import dataclass

from mintmind.budget import round_half_up

MAX_EMI_SHARE = 0.4


@dataclass(frozen=True)
class EMICalculation:
    principal: float
    interest_rate: float
    tenure_months: int
    emi: int
    total_payment: int
    total_interest: int


def _emi(principal: float, monthly_rate: float, months: int) -> float:
    if months <= 0:
        return 0.0
    if monthly_rate == 0:
        return principal / months
    growth = (1 + monthly_rate) ** months
    return principal * monthly_rate * growth / (growth - 1)


def calculate_emi(principal: float, annual_interest_rate: float, tenure_years: float) -> EMICalculation:
    monthly_rate = annual_interest_rate / 100 / 12
    tenure_months = int(round(tenure_years * 12))

    emi = _emi(principal, monthly_rate, tenure_months)
    total_payment = emi * tenure_months
    return EMICalculation(
        principal=principal,
        interest_rate=annual_interest_rate,
        tenure_months=tenure_months,
        emi=round_half_up(emi),
        total_payment=round_half_up(total_payment),
        total_interest=round_half_up(total_payment - principal) if tenure_months else 0,
    )


def calculate_max_emi(monthly_income: float) -> int:
    return round_half_up(monthly_income * MAX_EMI_SHARE)


def calculate_max_loan_amount(monthly_income: float, annual_interest_rate: float, tenure_years: float) -> int:
    """Largest principal whose EMI fits in 40% of monthly income."""
    max_emi = calculate_max_emi(monthly_income)
    monthly_rate = annual_interest_rate / 100 / 12
    tenure_months = int(round(tenure_years * 12))

    if tenure_months <= 0:
        return 0
    if monthly_rate == 0:
        return max_emi * tenure_months

    growth = (1 + monthly_rate) ** tenure_months
    return round_half_up(max_emi * (growth - 1) / (monthly_rate * growth))
