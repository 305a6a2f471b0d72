"""Calendar windows used by the ledger and the analytics engine.

Every window is recomputed from ``now`` on each call; ``now`` defaults to the
wall clock so callers never see a stale "this month".
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple

Window = Tuple[datetime, datetime]


def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now()


def days_in_month(d: date) -> int:
    return calendar.monthrange(d.year, d.month)[1]


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Return ``(year, month)`` moved by ``delta`` months."""

    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_bounds(year: int, month: int) -> Window:
    first = date(year, month, 1)
    last = first.replace(day=days_in_month(first))
    return datetime.combine(first, time.min), datetime.combine(last, time.max)


def month_window(now: Optional[datetime] = None) -> Window:
    """The 1st 00:00:00 through the last day 23:59:59 of the current month."""

    now = _now(now)
    return month_bounds(now.year, now.month)


def week_window(now: Optional[datetime] = None) -> Window:
    """Sunday 00:00:00 through the following Saturday 23:59:59."""

    today = _now(now).date()
    # weekday(): Monday == 0, so Sunday is 6 days after Monday
    start = today - timedelta(days=(today.weekday() + 1) % 7)
    end = start + timedelta(days=6)
    return datetime.combine(start, time.min), datetime.combine(end, time.max)


def day_window(now: Optional[datetime] = None) -> Window:
    today = _now(now).date()
    return datetime.combine(today, time.min), datetime.combine(today, time.max)


def trailing_month_windows(now: Optional[datetime] = None, count: int = 3) -> List[Window]:
    """The current month and the ``count - 1`` months before it, oldest first."""

    now = _now(now)
    windows = []
    for delta in range(-(count - 1), 1):
        year, month = shift_month(now.year, now.month, delta)
        windows.append(month_bounds(year, month))
    return windows
