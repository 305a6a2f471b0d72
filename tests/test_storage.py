import json
from datetime import datetime
from pathlib import Path

import pytest

from mintmind.domain import (
    AppSettings,
    ExpenseCategory,
    IncomeCategory,
    RiskLevel,
    Theme,
    Transaction,
    TransactionType,
    UserProfile,
)
from mintmind.storage import (
    PROFILE_KEY,
    SETTINGS_KEY,
    TRANSACTIONS_KEY,
    JsonFileStore,
    MemoryStore,
    build_backup,
    load_app_settings,
    load_profile,
    load_seed,
    load_transactions,
    reset_data,
    save_app_settings,
    save_profile,
    save_transactions,
    transaction_from_dict,
    transaction_to_dict,
)

SEED_PATH = Path(__file__).parent.parent / "data" / "seed.json"


def make_trans():
    return (
        Transaction("t1", TransactionType.EXPENSE, 250.75, ExpenseCategory.FOOD,
                    datetime(2026, 10, 3, 19, 30), "Dinner", datetime(2026, 10, 3, 19, 31)),
        Transaction("t2", TransactionType.INCOME, 50000, IncomeCategory.SALARY,
                    datetime(2026, 10, 1, 9)),
    )


def test_transaction_dict_uses_stored_field_names():
    d = transaction_to_dict(make_trans()[0])
    assert d["type"] == "expense"
    assert d["category"] == "Food"
    assert d["createdAt"] == "2026-10-03T19:31:00"
    assert transaction_from_dict(d) == make_trans()[0]


def test_unknown_category_is_rejected():
    with pytest.raises(ValueError):
        transaction_from_dict({
            "id": "x", "type": "expense", "amount": 1, "category": "Salary",
            "date": "2026-10-01T00:00:00",
        })


@pytest.mark.asyncio
async def test_memory_store_round_trip():
    kv = MemoryStore()
    assert await save_transactions(kv, make_trans()) is True
    assert await save_profile(kv, UserProfile(monthly_income=1000, risk_level=RiskLevel.HIGH)) is True

    assert await load_transactions(kv) == make_trans()
    profile = await load_profile(kv)
    assert profile.monthly_income == 1000
    assert profile.risk_level == RiskLevel.HIGH


@pytest.mark.asyncio
async def test_missing_keys_give_empty_data():
    kv = MemoryStore()
    assert await load_transactions(kv) == ()
    assert await load_profile(kv) == UserProfile()


@pytest.mark.asyncio
async def test_corrupt_data_falls_back():
    kv = MemoryStore({TRANSACTIONS_KEY: "not json", PROFILE_KEY: "{broken"})
    assert await load_transactions(kv) == ()
    assert await load_profile(kv) == UserProfile()


@pytest.mark.asyncio
async def test_json_file_store(tmp_path):
    path = tmp_path / "nested" / "store.json"
    kv = JsonFileStore(path)
    assert await kv.get(TRANSACTIONS_KEY) is None

    await save_transactions(kv, make_trans())
    on_disk = json.loads(path.read_text(encoding="utf-8"))
    assert TRANSACTIONS_KEY in on_disk

    assert await load_transactions(JsonFileStore(path)) == make_trans()


@pytest.mark.asyncio
async def test_timezone_aware_dates_are_read():
    raw = json.dumps([{
        "id": "z", "type": "expense", "amount": 5, "category": "Other",
        "date": "2026-10-01T10:00:00Z", "note": None,
    }])
    trans = await load_transactions(MemoryStore({TRANSACTIONS_KEY: raw}))
    assert trans[0].date.tzinfo is None
    assert trans[0].note == ""


def test_seed_file_loads():
    profile, trans = load_seed(SEED_PATH)
    assert profile.monthly_income == 50000
    assert profile.has_completed_onboarding is True
    assert len(trans) == len({t.id for t in trans})
    assert any(t.is_refund for t in trans)


@pytest.mark.asyncio
async def test_app_settings_round_trip_and_defaults():
    kv = MemoryStore()
    assert await load_app_settings(kv) == AppSettings()

    await save_app_settings(kv, AppSettings(theme=Theme.DARK, currency="$"))
    assert await load_app_settings(kv) == AppSettings(theme=Theme.DARK, currency="$")

    broken = MemoryStore({SETTINGS_KEY: '{"theme": "neon"}'})
    assert await load_app_settings(broken) == AppSettings()


@pytest.mark.asyncio
async def test_reset_data_removes_profile_and_settings_only():
    kv = MemoryStore()
    await save_transactions(kv, make_trans())
    await save_profile(kv, UserProfile(monthly_income=1000))
    await save_app_settings(kv, AppSettings(theme=Theme.DARK))

    assert await reset_data(kv) is True
    assert await kv.get(PROFILE_KEY) is None
    assert await kv.get(SETTINGS_KEY) is None
    assert await load_transactions(kv) == make_trans()


@pytest.mark.asyncio
async def test_json_file_store_remove(tmp_path):
    kv = JsonFileStore(tmp_path / "store.json")
    await save_profile(kv, UserProfile(monthly_income=1000))
    await save_transactions(kv, make_trans())

    assert await reset_data(kv) is True
    assert await kv.get(PROFILE_KEY) is None
    assert await load_transactions(kv) == make_trans()


def test_build_backup():
    raw = build_backup(UserProfile(monthly_income=2500), AppSettings(), datetime(2026, 10, 19, 8, 30))
    data = json.loads(raw)
    assert set(data) == {"userProfile", "settings", "timestamp"}
    assert data["userProfile"]["risk_level"] == "medium"
    assert data["settings"]["theme"] == "light"
    assert data["timestamp"] == "2026-10-19T08:30:00"
