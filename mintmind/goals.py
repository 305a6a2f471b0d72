from dataclasses import dataclass
from typing import Sequence

from mintmind.budget import round_half_up
from mintmind.emi import calculate_max_loan_amount
from mintmind.sip import calculate_target_sip, sip_future_value

MAX_LOAN_YEARS = 20

# (minimum % of target reached, description), checked top down
MILESTONE_LABELS = (
    (100, "Goal achieved!"),
    (75, "Almost there!"),
    (50, "Halfway to your goal"),
    (25, "Good progress"),
    (0, "Building momentum"),
)


@dataclass(frozen=True)
class Milestone:
    year: int
    amount: int
    description: str


@dataclass(frozen=True)
class GoalPlan:
    target_amount: float
    timeline_years: int
    current_savings: float
    required_monthly_sip: int
    possible_loan_amount: int
    milestones: Sequence[Milestone]


def describe_progress(percentage: float) -> str:
    for threshold, label in MILESTONE_LABELS:
        if percentage >= threshold:
            return label
    return MILESTONE_LABELS[-1][1]


def create_goal_plan(
    target_amount: float,
    timeline_years: int,
    current_savings: float,
    monthly_income: float,
    expected_return_percent: float = 12,
    loan_interest_rate: float = 8.5,
) -> GoalPlan:
    remaining = max(0.0, target_amount - current_savings)
    required_sip = calculate_target_sip(remaining, timeline_years, expected_return_percent)
    possible_loan = calculate_max_loan_amount(
        monthly_income, loan_interest_rate, min(timeline_years, MAX_LOAN_YEARS)
    )

    monthly_rate = expected_return_percent / 100 / 12
    milestones = []
    for year in range(1, timeline_years + 1):
        accumulated = current_savings + sip_future_value(required_sip, monthly_rate, year * 12)
        percentage = accumulated / target_amount * 100 if target_amount > 0 else 100.0
        milestones.append(Milestone(
            year=year,
            amount=round_half_up(accumulated),
            description=describe_progress(percentage),
        ))

    return GoalPlan(
        target_amount=target_amount,
        timeline_years=timeline_years,
        current_savings=current_savings,
        required_monthly_sip=required_sip,
        possible_loan_amount=possible_loan,
        milestones=tuple(milestones),
    )
