"""Async key-value persistence for transactions, the user profile and settings.

The analytics engine never touches a store; these helpers convert between the
stored JSON strings and domain records. Read failures fall back to empty data
and write failures are reported as ``False``.
"""

import asyncio
import json
import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Protocol, Tuple

from mintmind.domain import (
    AppSettings,
    RiskLevel,
    Theme,
    Transaction,
    TransactionType,
    UserProfile,
    parse_category,
)

logger = logging.getLogger(__name__)

TRANSACTIONS_KEY = "transactions"
PROFILE_KEY = "userProfile"
SETTINGS_KEY = "settings"


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> bool:
        ...

    async def remove(self, *keys: str) -> bool:
        ...


class MemoryStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        await asyncio.sleep(0)
        return self._data.get(key)

    async def set(self, key: str, value: str) -> bool:
        await asyncio.sleep(0)
        self._data[key] = value
        return True

    async def remove(self, *keys: str) -> bool:
        await asyncio.sleep(0)
        for key in keys:
            self._data.pop(key, None)
        return True


class JsonFileStore:
    """All keys in one JSON object on disk."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _dump(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def _write(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._dump(data)

    def _delete(self, keys: Tuple[str, ...]) -> None:
        data = self._read()
        for key in keys:
            data.pop(key, None)
        self._dump(data)

    async def get(self, key: str) -> Optional[str]:
        data = await asyncio.to_thread(self._read)
        return data.get(key)

    async def set(self, key: str, value: str) -> bool:
        try:
            await asyncio.to_thread(self._write, key, value)
        except OSError as e:
            logger.error("Error writing %s to %s: %s", key, self.path, e)
            return False
        return True

    async def remove(self, *keys: str) -> bool:
        try:
            await asyncio.to_thread(self._delete, keys)
        except OSError as e:
            logger.error("Error removing %s from %s: %s", ", ".join(keys), self.path, e)
            return False
        return True


def transaction_to_dict(t: Transaction) -> dict:
    return {
        "id": t.id,
        "type": t.type.value,
        "amount": t.amount,
        "category": getattr(t.category, "value", t.category),
        "date": t.date.isoformat(),
        "note": t.note,
        "createdAt": t.created_at.isoformat() if t.created_at else None,
    }


def transaction_from_dict(d: dict) -> Transaction:
    tx_type = TransactionType(d["type"])
    created = d.get("createdAt") or d.get("created_at")
    return Transaction(
        id=str(d["id"]),
        type=tx_type,
        amount=float(d["amount"]),
        category=parse_category(tx_type, d["category"]),
        date=_parse_datetime(d["date"]),
        note=d.get("note") or "",
        created_at=_parse_datetime(created) if created else None,
    )


def _parse_datetime(value: str) -> datetime:
    # trailing "Z" is not accepted by fromisoformat before 3.11; stored
    # timestamps are treated as local wall-clock time
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def serialize_transactions(trans: Tuple[Transaction, ...]) -> str:
    return json.dumps([transaction_to_dict(t) for t in trans], ensure_ascii=False)


def deserialize_transactions(raw: str) -> Tuple[Transaction, ...]:
    return tuple(transaction_from_dict(d) for d in json.loads(raw))


def profile_to_dict(p: UserProfile) -> dict:
    data = asdict(p)
    data["risk_level"] = p.risk_level.value
    return data


def profile_from_dict(d: dict) -> UserProfile:
    fields = dict(d)
    fields["risk_level"] = RiskLevel(fields.get("risk_level", RiskLevel.MEDIUM.value))
    return UserProfile(**fields)


def settings_to_dict(s: AppSettings) -> dict:
    return {"theme": s.theme.value, "currency": s.currency}


def settings_from_dict(d: dict) -> AppSettings:
    defaults = AppSettings()
    return AppSettings(
        theme=Theme(d.get("theme", defaults.theme.value)),
        currency=d.get("currency") or defaults.currency,
    )


async def load_transactions(store: KeyValueStore) -> Tuple[Transaction, ...]:
    try:
        raw = await store.get(TRANSACTIONS_KEY)
        return deserialize_transactions(raw) if raw else ()
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.error("Error loading transactions: %s", e)
        return ()


async def save_transactions(store: KeyValueStore, trans: Tuple[Transaction, ...]) -> bool:
    return await store.set(TRANSACTIONS_KEY, serialize_transactions(trans))


async def load_profile(store: KeyValueStore) -> UserProfile:
    try:
        raw = await store.get(PROFILE_KEY)
        return profile_from_dict(json.loads(raw)) if raw else UserProfile()
    except (OSError, ValueError, TypeError) as e:
        logger.error("Error loading user profile: %s", e)
        return UserProfile()


async def save_profile(store: KeyValueStore, profile: UserProfile) -> bool:
    return await store.set(PROFILE_KEY, json.dumps(profile_to_dict(profile)))


async def load_app_settings(store: KeyValueStore) -> AppSettings:
    try:
        raw = await store.get(SETTINGS_KEY)
        return settings_from_dict(json.loads(raw)) if raw else AppSettings()
    except (OSError, ValueError, TypeError) as e:
        logger.error("Error loading settings: %s", e)
        return AppSettings()


async def save_app_settings(store: KeyValueStore, settings: AppSettings) -> bool:
    return await store.set(SETTINGS_KEY, json.dumps(settings_to_dict(settings), ensure_ascii=False))


async def reset_data(store: KeyValueStore) -> bool:
    """Forget the profile and settings. Transactions are kept."""
    return await store.remove(PROFILE_KEY, SETTINGS_KEY)


def build_backup(profile: UserProfile, settings: AppSettings, now: Optional[datetime] = None) -> str:
    now = now if now is not None else datetime.now()
    return json.dumps({
        "userProfile": profile_to_dict(profile),
        "settings": settings_to_dict(settings),
        "timestamp": now.isoformat(),
    }, ensure_ascii=False, indent=2)


def load_seed(path: str | Path) -> Tuple[UserProfile, Tuple[Transaction, ...]]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    profile = profile_from_dict(data["profile"]) if data.get("profile") else UserProfile()
    transactions = tuple(transaction_from_dict(t) for t in data.get("transactions", []))
    return profile, transactions
