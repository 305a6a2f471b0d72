from datetime import date, datetime, time
from functools import lru_cache

from mintmind.domain import Transaction
from mintmind.engine import FinanceSnapshot, build_finance_snapshot
from mintmind.ledger import monthly_transactions
from mintmind.summary import InsightSummary, build_insight_summary

# Keys are the immutable transaction tuple (its hash acts as the collection
# version) plus the calendar day. Figures that only depend on the date are
# safe to reuse for the rest of that day.


@lru_cache(maxsize=32)
def cached_finance_snapshot(trans: tuple[Transaction, ...], today: date) -> FinanceSnapshot:
    now = datetime.combine(today, time.max)
    return build_finance_snapshot(monthly_transactions(trans, now), now)


@lru_cache(maxsize=32)
def cached_insight_summary(trans: tuple[Transaction, ...], monthly_limit: float, today: date) -> InsightSummary:
    return build_insight_summary(trans, monthly_limit, datetime.combine(today, time.max))


def clear_caches() -> None:
    cached_finance_snapshot.cache_clear()
    cached_insight_summary.cache_clear()
