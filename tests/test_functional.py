import math
from datetime import datetime

import pytest

from mintmind.domain import ExpenseCategory, IncomeCategory, Transaction, TransactionType
from mintmind.functional import (
    InvalidTransaction,
    Left,
    Nothing,
    Right,
    Some,
    new_transaction,
    safe_transaction,
    validate_transaction,
)


def make_tx(tx_id="t1", tx_type=TransactionType.EXPENSE, amount=100.0, category=ExpenseCategory.FOOD):
    return Transaction(
        id=tx_id,
        type=tx_type,
        amount=amount,
        category=category,
        date=datetime(2026, 10, 1, 12),
    )


def test_safe_transaction_found_and_missing():
    t = make_tx()
    assert safe_transaction((t,), "t1") == Some(t)
    missing = safe_transaction((t,), "nope")
    assert missing == Nothing()
    assert missing.is_none()
    assert missing.map(lambda x: x.amount).get_or_else(0) == 0


def test_validate_transaction_ok():
    t = make_tx()
    result = validate_transaction(t)
    assert result.is_right()
    assert result == Right(t)


def test_validate_rejects_negative_amount():
    result = validate_transaction(make_tx(amount=-5))
    assert result.is_left()
    assert result.get_error()["error"] == "negative_amount"


def test_validate_rejects_non_finite_amount():
    result = validate_transaction(make_tx(amount=math.nan))
    assert result.get_error()["error"] == "invalid_amount"
    result = validate_transaction(make_tx(amount=math.inf))
    assert result.get_error()["error"] == "invalid_amount"


def test_validate_rejects_category_for_wrong_type():
    result = validate_transaction(make_tx(category=IncomeCategory.REFUND))
    assert result.is_left()
    assert result.get_error()["error"] == "category_type_mismatch"

    result = validate_transaction(
        make_tx(tx_type=TransactionType.INCOME, category=ExpenseCategory.SHOPPING)
    )
    assert result.get_error()["error"] == "category_type_mismatch"


def test_validate_rejects_empty_id():
    assert validate_transaction(make_tx(tx_id="")).get_error()["error"] == "empty_id"


def test_left_short_circuits_bind():
    calls = []
    left = Left({"error": "x"})
    out = left.bind(lambda t: calls.append(t) or Right(t))
    assert out.is_left()
    assert calls == []


def test_new_transaction_assigns_unique_ids():
    a = new_transaction(TransactionType.EXPENSE, 10, ExpenseCategory.FOOD, datetime(2026, 10, 1))
    b = new_transaction(TransactionType.EXPENSE, 10, ExpenseCategory.FOOD, datetime(2026, 10, 1))
    assert a.id and b.id
    assert a.id != b.id
    assert a.created_at is not None


def test_new_transaction_raises_on_invalid():
    with pytest.raises(InvalidTransaction) as exc:
        new_transaction(TransactionType.EXPENSE, -1, ExpenseCategory.FOOD, datetime(2026, 10, 1))
    assert exc.value.error["error"] == "negative_amount"
    assert isinstance(exc.value, ValueError)


def test_validate_requires_category_enum_of_matching_type():
    plain = validate_transaction(make_tx(category="Shopping"))
    assert plain.is_left()
    assert plain.get_error()["error"] == "category_type_mismatch"

    # "Other" exists in both sets; only the income member is valid here
    crossed = validate_transaction(
        make_tx(tx_type=TransactionType.INCOME, category=ExpenseCategory.OTHER)
    )
    assert crossed.get_error()["error"] == "category_type_mismatch"
    assert validate_transaction(
        make_tx(tx_type=TransactionType.INCOME, category=IncomeCategory.OTHER)
    ).is_right()
