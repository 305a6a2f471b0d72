import logging
from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

from mintmind.ledger import RemainingBudget
from mintmind.memo import clear_caches

__all__ = [
    'TRANSACTION_ADDED', 'TRANSACTION_UPDATED', 'TRANSACTION_DELETED', 'BUDGET_ALERT',
    'Event', 'EventBus', 'default_event_bus',
]

logger = logging.getLogger(__name__)

TRANSACTION_ADDED = "TRANSACTION_ADDED"
TRANSACTION_UPDATED = "TRANSACTION_UPDATED"
TRANSACTION_DELETED = "TRANSACTION_DELETED"
BUDGET_ALERT = "BUDGET_ALERT"

WRITE_EVENTS = (TRANSACTION_ADDED, TRANSACTION_UPDATED, TRANSACTION_DELETED)


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        handlers = self._subscribers.get(name, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        handlers = self._subscribers.get(name)
        if not handlers:
            return []
        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        logger.debug("publishing %s to %d handler(s)", name, len(handlers))
        return [handler(event, payload) for handler in handlers]


def invalidate_cache_handler(event: Event, payload: dict) -> dict:
    clear_caches()
    return {"invalidated": True, "event": event.name}


def check_budget_handler(event: Event, payload: dict) -> dict:
    """Turn a ``RemainingBudget`` payload into the dashboard's overspend alert.

    The weekly alert is only raised when the daily one is not, the monthly
    one whenever the month is over the limit.
    """
    remaining = payload.get("remaining")
    if not isinstance(remaining, RemainingBudget):
        return {}

    alerts = []
    if remaining.daily_remaining < 0:
        alerts.append({
            "period": "daily",
            "message": f"Daily Budget Exceeded: you overspent by {abs(remaining.daily_remaining):,.0f}",
            "overspent": abs(remaining.daily_remaining),
        })
    elif remaining.weekly_remaining < 0:
        alerts.append({
            "period": "weekly",
            "message": f"Weekly Budget Exceeded: you overspent by {abs(remaining.weekly_remaining):,.0f}",
            "overspent": abs(remaining.weekly_remaining),
        })
    if remaining.monthly_remaining < 0:
        alerts.append({
            "period": "monthly",
            "message": f"Monthly Budget Exceeded: you overspent by {abs(remaining.monthly_remaining):,.0f}",
            "overspent": abs(remaining.monthly_remaining),
        })
    return {"alerts": alerts} if alerts else {}


def default_event_bus() -> EventBus:
    bus = EventBus()
    for name in WRITE_EVENTS:
        bus.subscribe(name, invalidate_cache_handler)
    bus.subscribe(BUDGET_ALERT, check_budget_handler)
    return bus
