"""Either-style results for input validation, plus small composition helpers.

Validators return ``Right(value)`` or ``Left(error)`` where ``error`` is a
dict with an ``error`` code and a user-facing ``message``. Steps chain with
``bind``/``map``; the caller turns the outcome into a value or an exception
with ``get_or_raise``.
"""
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import reduce
from typing import TypeVar, Generic, Callable, Iterable, Optional, Union

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_raise(self, to_exception: Callable[[E], Exception]) -> T:
        pass

    def is_left(self) -> bool:
        return isinstance(self, Left)

    def is_right(self) -> bool:
        return isinstance(self, Right)


@dataclass(frozen=True)
class Right(Either[E, T]):
    value: T

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self.value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self.value)

    def get_or_raise(self, to_exception: Callable[[E], Exception]) -> T:
        return self.value


@dataclass(frozen=True)
class Left(Either[E, T]):
    error: E

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return self

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return self

    def get_or_raise(self, to_exception: Callable[[E], Exception]) -> T:
        raise to_exception(self.error)


def parse_amount(raw: Union[str, int, float, None]) -> Either[dict, float]:
    """Turn user input into a positive amount.

    Accepts text (as typed into the amount field) or a number. Empty text,
    non-numeric text, NaN, infinity, zero and negative values are rejected.
    """
    if raw is None or isinstance(raw, bool):
        return Left({
            "error": "invalid_amount",
            "message": "Please enter amount and category",
            "amount": raw,
        })

    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return Left({
                "error": "invalid_amount",
                "message": "Please enter amount and category",
                "amount": raw,
            })
        try:
            value = float(text)
        except ValueError:
            return Left({
                "error": "invalid_amount",
                "message": "Enter a valid amount",
                "amount": raw,
            })
    else:
        value = float(raw)

    if math.isnan(value) or math.isinf(value) or value <= 0:
        return Left({
            "error": "invalid_amount",
            "message": "Enter a valid amount",
            "amount": raw,
        })

    return Right(value)


def validate_category(
    category: Optional[str],
    categories: Optional[Iterable[str]] = None,
) -> Either[dict, str]:
    """Check the category picked for a new expense.

    With ``categories`` given, the name must also be one of them.
    """
    if not category:
        return Left({
            "error": "missing_category",
            "message": "Please enter amount and category",
            "category": category,
        })

    if categories is not None and category not in tuple(categories):
        return Left({
            "error": "unknown_category",
            "message": f"Category {category} does not exist",
            "category": category,
        })

    return Right(category)


def validate_category_name(name: Optional[str]) -> Either[dict, str]:
    cleaned = (name or "").strip()
    if not cleaned:
        return Left({
            "error": "empty_category_name",
            "message": "Enter a valid category",
            "name": name,
        })
    return Right(cleaned)


def validate_expense_input(
    amount: Union[str, int, float, None],
    category: Optional[str],
) -> Either[dict, tuple[float, str]]:
    """Validate a new expense's amount, then its category; first failure wins."""
    return parse_amount(amount).bind(
        lambda value: validate_category(category).map(lambda name: (value, name))
    )


def compose(*funcs):
    """compose(f, g, h)(x) == f(g(h(x)))"""
    return lambda x: reduce(lambda acc, f: f(acc), reversed(funcs), x)


def pipe(x, *funcs):
    """pipe(x, f, g, h) == h(g(f(x)))"""
    return reduce(lambda acc, f: f(acc), funcs, x)
