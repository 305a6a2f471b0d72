import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from mintmind.budget import BudgetBreakdown, calculate_503020_budget
from mintmind.domain import AppSettings, Category, FinanceContext, Transaction, TransactionType, UserProfile
from mintmind.engine import FinanceSnapshot
from mintmind.events import (
    BUDGET_ALERT,
    TRANSACTION_ADDED,
    TRANSACTION_DELETED,
    TRANSACTION_UPDATED,
    EventBus,
    default_event_bus,
)
from mintmind.functional import InvalidTransaction, Maybe, new_transaction, safe_transaction, validate_transaction
from mintmind.insights import TransactionInsight, insight_for
from mintmind.ledger import RemainingBudget, monthly_transactions, remaining_budget
from mintmind.memo import cached_finance_snapshot, cached_insight_summary
from mintmind.storage import (
    KeyValueStore,
    build_backup,
    load_app_settings,
    load_profile,
    load_transactions,
    reset_data,
    save_app_settings,
    save_profile,
    save_transactions,
)
from mintmind.summary import InsightSummary

logger = logging.getLogger(__name__)


class TransactionStore:
    """Owns the transaction collection, profile and settings for one user.

    The collection is an immutable tuple replaced on every write, so any
    snapshot handed to the engine stays consistent. Writes publish on the bus,
    which by default clears the memoised reports.
    """

    def __init__(
        self,
        transactions: Tuple[Transaction, ...] = (),
        profile: Optional[UserProfile] = None,
        bus: Optional[EventBus] = None,
        settings: Optional[AppSettings] = None,
    ):
        self.transactions: Tuple[Transaction, ...] = tuple(transactions)
        self.profile = profile or UserProfile()
        self.settings = settings or AppSettings()
        self.bus = bus or default_event_bus()

    # --- writes

    def add_transaction(
        self,
        tx_type: TransactionType,
        amount: float,
        category: Category,
        date: datetime,
        note: str = "",
    ) -> Transaction:
        t = new_transaction(tx_type, amount, category, date, note)
        # newest first, like the entry list
        self.transactions = (t,) + self.transactions
        logger.info("added %s %s %.2f (%s)", t.type.value, getattr(t.category, "value", t.category), t.amount, t.id)
        self.bus.publish(TRANSACTION_ADDED, {"transaction": t})
        return t

    def update_transaction(self, tx_id: str, **updates) -> Transaction:
        if "id" in updates or "created_at" in updates:
            raise ValueError("id and created_at cannot be changed")
        current = safe_transaction(self.transactions, tx_id).get_or_else(None)
        if current is None:
            raise KeyError(tx_id)

        updated = replace(current, **updates)
        result = validate_transaction(updated)
        if result.is_left():
            raise InvalidTransaction(result.get_error())

        self.transactions = tuple(updated if t.id == tx_id else t for t in self.transactions)
        self.bus.publish(TRANSACTION_UPDATED, {"transaction": updated})
        return updated

    def delete_transaction(self, tx_id: str) -> bool:
        remaining = tuple(t for t in self.transactions if t.id != tx_id)
        if len(remaining) == len(self.transactions):
            return False
        self.transactions = remaining
        logger.info("deleted transaction %s", tx_id)
        self.bus.publish(TRANSACTION_DELETED, {"id": tx_id})
        return True

    def update_profile(self, **updates) -> UserProfile:
        self.profile = replace(self.profile, **updates)
        return self.profile

    def update_settings(self, **updates) -> AppSettings:
        self.settings = replace(self.settings, **updates)
        return self.settings

    # --- reads

    @property
    def budget(self) -> Optional[BudgetBreakdown]:
        if self.profile.monthly_income <= 0:
            return None
        return calculate_503020_budget(self.profile.monthly_income)

    @property
    def monthly_limit(self) -> float:
        budget = self.budget
        if budget is None:
            raise ValueError("monthly limit needs a profile with a monthly income")
        return budget.monthly_limit

    def monthly_transactions(self, now: Optional[datetime] = None) -> Tuple[Transaction, ...]:
        return monthly_transactions(self.transactions, now)

    def finance_snapshot(self, now: Optional[datetime] = None) -> FinanceSnapshot:
        return cached_finance_snapshot(self.transactions, (now or datetime.now()).date())

    def insight_summary(self, now: Optional[datetime] = None) -> InsightSummary:
        return cached_insight_summary(self.transactions, self.monthly_limit, (now or datetime.now()).date())

    def insight_for(self, tx_id: str, now: Optional[datetime] = None) -> Maybe[TransactionInsight]:
        return insight_for(tx_id, self.monthly_transactions(now), self.monthly_limit, now)

    def remaining_budget(self, now: Optional[datetime] = None) -> Optional[RemainingBudget]:
        budget = self.budget
        if budget is None:
            return None
        return remaining_budget(budget, self.transactions, now)

    def budget_alerts(self, now: Optional[datetime] = None) -> list:
        remaining = self.remaining_budget(now)
        if remaining is None:
            return []
        alerts = []
        for result in self.bus.publish(BUDGET_ALERT, {"remaining": remaining}):
            alerts.extend(result.get("alerts", []))
        return alerts

    def monthly_report(
        self, now: Optional[datetime] = None, service: Optional["BudgetService"] = None
    ) -> Dict[str, Any]:
        service = service or default_budget_service()
        ctx = FinanceContext(self.transactions, self.monthly_limit, now or datetime.now())
        return service.monthly_report(ctx)

    def backup(self, now: Optional[datetime] = None) -> str:
        return build_backup(self.profile, self.settings, now)

    # --- persistence

    async def load(self, store: KeyValueStore) -> None:
        self.transactions = await load_transactions(store)
        self.profile = await load_profile(store)
        self.settings = await load_app_settings(store)
        self.bus.publish(TRANSACTION_UPDATED, {"loaded": len(self.transactions)})

    async def save(self, store: KeyValueStore) -> bool:
        saved_tx = await save_transactions(store, self.transactions)
        saved_profile = await save_profile(store, self.profile)
        saved_settings = await save_app_settings(store, self.settings)
        ok = saved_tx and saved_profile and saved_settings
        if not ok:
            logger.error(
                "Error saving data: transactions=%s profile=%s settings=%s",
                saved_tx, saved_profile, saved_settings,
            )
        return ok

    async def reset(self, store: KeyValueStore) -> bool:
        """Back to the default profile and settings; transactions stay."""
        self.profile = UserProfile()
        self.settings = AppSettings()
        removed = await reset_data(store)
        if not removed:
            logger.error("Error resetting data")
        return removed


Validator = Callable[[FinanceContext], Sequence[str]]
Calculator = Callable[..., Dict[str, Any]]


class BudgetService:
    """Facade for monthly reports using injected validators and calculators.

    validators: functions taking a FinanceContext -> Sequence[str] of problems
    calculators: functions taking (FinanceContext, acc) -> dict of partial results
    """

    def __init__(self, validators: Sequence[Validator], calculators: Sequence[Calculator]):
        self.validators = validators
        self.calculators = calculators

    def monthly_report(self, ctx: FinanceContext) -> Dict[str, Any]:
        report = {
            "month": ctx.now.strftime("%Y-%m"),
            "validation": [],
            "steps": [],
            "result": {},
        }

        for v in self.validators:
            try:
                msgs = v(ctx)
            except Exception as e:
                logger.warning("validator %s failed: %s", getattr(v, "__name__", v), e)
                msgs = [f"validator_error: {e}"]
            report["validation"].append({"validator": getattr(v, "__name__", str(v)), "messages": list(msgs)})

        # calculators run in order and see what earlier ones produced
        acc: Dict[str, Any] = {}
        for calc in self.calculators:
            out = calc(ctx, acc)
            report["steps"].append({"calculator": getattr(calc, "__name__", str(calc)), "output": out})
            if isinstance(out, dict):
                acc.update(out)

        report["result"] = acc
        return report


def check_monthly_limit(ctx: FinanceContext) -> Sequence[str]:
    if ctx.monthly_limit <= 0:
        return [f"monthly limit must be positive, got {ctx.monthly_limit}"]
    return []


def check_transactions(ctx: FinanceContext) -> Sequence[str]:
    msgs = []
    for t in ctx.transactions:
        result = validate_transaction(t)
        if result.is_left():
            msgs.append(f"{t.id}: {result.get_error()['message']}")
    return msgs


def finance_calculator(ctx: FinanceContext, acc: Dict[str, Any]) -> Dict[str, Any]:
    return {"snapshot": cached_finance_snapshot(ctx.transactions, ctx.now.date())}


def summary_calculator(ctx: FinanceContext, acc: Dict[str, Any]) -> Dict[str, Any]:
    return {"summary": cached_insight_summary(ctx.transactions, ctx.monthly_limit, ctx.now.date())}


def remaining_calculator(ctx: FinanceContext, acc: Dict[str, Any]) -> Dict[str, Any]:
    snapshot: FinanceSnapshot = acc.get("snapshot") or cached_finance_snapshot(ctx.transactions, ctx.now.date())
    return {
        "limit_remaining": ctx.monthly_limit - snapshot.net_expenses,
        "over_limit": snapshot.net_expenses > ctx.monthly_limit,
    }


def default_budget_service() -> BudgetService:
    return BudgetService(
        validators=[check_monthly_limit, check_transactions],
        calculators=[finance_calculator, summary_calculator, remaining_calculator],
    )
