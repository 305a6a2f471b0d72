import math
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Generic, Iterable, Optional, TypeVar

from mintmind.domain import (
    Category,
    Transaction,
    TransactionType,
    category_enum_for,
)

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Right carries no error")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return Left(self._error)

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


class InvalidTransaction(ValueError):
    """Raised at the creation boundary when validation returns ``Left``."""

    def __init__(self, error: dict):
        super().__init__(error.get("message", "invalid transaction"))
        self.error = error


def safe_transaction(trans: Iterable[Transaction], tx_id: str) -> Maybe[Transaction]:
    for t in trans:
        if t.id == tx_id:
            return Some(t)
    return Nothing()


def _check_id(t: Transaction) -> Either[dict, Transaction]:
    if not t.id:
        return Left({
            "error": "empty_id",
            "message": "Transaction id must not be empty",
        })
    return Right(t)


def _check_amount(t: Transaction) -> Either[dict, Transaction]:
    if isinstance(t.amount, bool) or not isinstance(t.amount, (int, float)) or not math.isfinite(t.amount):
        return Left({
            "error": "invalid_amount",
            "message": f"Amount {t.amount!r} is not a finite number",
            "amount": t.amount,
        })
    if t.amount < 0:
        return Left({
            "error": "negative_amount",
            "message": f"Amount cannot be negative: {t.amount}",
            "amount": t.amount,
        })
    return Right(t)


def _check_category(t: Transaction) -> Either[dict, Transaction]:
    if not isinstance(t.category, category_enum_for(t.type)):
        return Left({
            "error": "category_type_mismatch",
            "message": f"Category {t.category!r} is not valid for {t.type.value} transactions",
            "category": t.category,
            "type": t.type.value,
        })
    return Right(t)


def validate_transaction(t: Transaction) -> Either[dict, Transaction]:
    return Right(t).bind(_check_id).bind(_check_amount).bind(_check_category)


def new_transaction(
    tx_type: TransactionType,
    amount: float,
    category: Category,
    date: datetime,
    note: str = "",
    tx_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> Transaction:
    """Build and validate a transaction, raising ``InvalidTransaction`` on failure."""
    t = Transaction(
        id=tx_id if tx_id is not None else uuid.uuid4().hex,
        type=tx_type,
        amount=amount,
        category=category,
        date=date,
        note=note or "",
        created_at=created_at or datetime.now(),
    )
    result = validate_transaction(t)
    if result.is_left():
        raise InvalidTransaction(result.get_error())
    return result.get_or_else(t)
