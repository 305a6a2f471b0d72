"""Roll per-category health and pattern data up into a short action list."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from mintmind.budget import DAYS_PER_MONTH, round_half_up
from mintmind.domain import Category, ExpenseCategory, Transaction
from mintmind.engine import FinanceSnapshot, build_finance_snapshot
from mintmind.insights import (
    CategoryHealth,
    category_allocation,
    category_spent,
    category_usage,
    classify_health,
)
from mintmind.ledger import filter_by_date_range, monthly_transactions
from mintmind.patterns import PatternAnalysis, Trend, analyze_all_patterns

MAX_ACTIONS = 3
CONFIDENCE_BASE = 50
CONFIDENCE_CAP = 100
RECENT_DAYS = 7
RECENT_WEIGHT = 2
STABILITY_BONUS = 20


@dataclass(frozen=True)
class CategoryScore:
    category: Category
    spent: float
    allocation: float
    usage_percent: float
    status: CategoryHealth


@dataclass(frozen=True)
class InsightSummary:
    category_scores: Sequence[CategoryScore]
    categories_over_threshold: Sequence[Category]
    total_savings_potential: float
    projection_confidence: int
    recommended_actions: Sequence[str]


def category_scores(month_trans: Iterable[Transaction], monthly_limit: float) -> List[CategoryScore]:
    """Scores for every category with spending, highest usage first."""
    trans = tuple(month_trans)
    scores = []
    for category in ExpenseCategory:
        spent = category_spent(trans, category)
        if spent <= 0:
            continue
        usage = category_usage(spent, monthly_limit)
        scores.append(CategoryScore(
            category=category,
            spent=spent,
            allocation=category_allocation(monthly_limit),
            usage_percent=round(usage, 1),
            status=classify_health(usage),
        ))
    scores.sort(key=lambda s: s.usage_percent, reverse=True)
    return scores


def savings_potential(patterns: Mapping[Category, PatternAnalysis]) -> float:
    # suggested budget for a category is its trailing 3-month average
    return round(sum(
        max(0.0, p.current_month_total - p.three_month_average) for p in patterns.values()
    ), 2)


def projection_confidence(
    trans: Iterable[Transaction],
    patterns: Mapping[Category, PatternAnalysis],
    now: datetime,
) -> int:
    recent = len(filter_by_date_range(trans, now - timedelta(days=RECENT_DAYS), now))
    bonus = 0.0
    if patterns:
        stable = sum(1 for p in patterns.values() if p.trend == Trend.STABLE)
        bonus = STABILITY_BONUS * stable / len(patterns)
    return min(CONFIDENCE_CAP, round_half_up(CONFIDENCE_BASE + RECENT_WEIGHT * recent + bonus))


def recommended_actions(
    scores: Sequence[CategoryScore],
    total_savings: float,
    snapshot: FinanceSnapshot,
    monthly_limit: float,
) -> List[str]:
    actions = []
    for score in scores:
        if score.status != CategoryHealth.HEALTHY:
            name = getattr(score.category, "value", score.category)
            actions.append(f"Cut back on {name}: {score.usage_percent:.0f}% of its budget used")
    if total_savings > 0:
        actions.append(
            f"You could save {total_savings:,.0f} by returning to your 3-month average spend"
        )
    daily_target = monthly_limit / DAYS_PER_MONTH
    if snapshot.burn_rate > daily_target:
        actions.append(
            f"Slow your daily pace: {snapshot.burn_rate:,.2f}/day against a {daily_target:,.0f}/day target"
        )
    # dict keeps first occurrence order
    return list(dict.fromkeys(actions))[:MAX_ACTIONS]


def build_insight_summary(
    transactions: Iterable[Transaction],
    monthly_limit: float,
    now: Optional[datetime] = None,
) -> InsightSummary:
    if monthly_limit < 0:
        raise ValueError(f"monthly_limit must be >= 0, got {monthly_limit}")
    now = now if now is not None else datetime.now()
    trans = tuple(transactions)
    month = monthly_transactions(trans, now)

    scores = category_scores(month, monthly_limit)
    patterns: Dict[ExpenseCategory, PatternAnalysis] = analyze_all_patterns(trans, now)
    total_savings = savings_potential(patterns)
    snapshot = build_finance_snapshot(month, now)

    return InsightSummary(
        category_scores=tuple(scores),
        categories_over_threshold=tuple(
            s.category for s in scores if s.status != CategoryHealth.HEALTHY
        ),
        total_savings_potential=total_savings,
        projection_confidence=projection_confidence(trans, patterns, now),
        recommended_actions=tuple(recommended_actions(scores, total_savings, snapshot, monthly_limit)),
    )
