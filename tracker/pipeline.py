"""Filter, search, sort and group expenses for the day-sectioned list.

The steps run in a fixed order: category filter, note search, sort, then
grouping, so each day's records keep the order chosen by the sort.
"""
from datetime import date, datetime
from functools import partial
from typing import Dict, Iterable, List, Tuple

from tracker.domain import Expense, LATEST, HIGHEST, SORT_MODES
from tracker.functional import pipe
from tracker.windows import to_local


def filter_by_category(expenses: Iterable[Expense], category: str) -> Tuple[Expense, ...]:
    if not category:
        return tuple(expenses)
    return tuple(e for e in expenses if e.category == category)


def search_notes(expenses: Iterable[Expense], search: str) -> Tuple[Expense, ...]:
    needle = (search or "").strip().lower()
    if not needle:
        return tuple(expenses)
    return tuple(e for e in expenses if needle in e.note.lower())


def sort_expenses(expenses: Iterable[Expense], sort_mode: str = LATEST) -> Tuple[Expense, ...]:
    # sorted() is stable, and stays stable with reverse=True.
    # timestamp() orders by the absolute instant; naive dates count as local.
    if sort_mode == LATEST:
        return tuple(sorted(expenses, key=lambda e: e.date.timestamp(), reverse=True))
    if sort_mode == HIGHEST:
        return tuple(sorted(expenses, key=lambda e: e.amount, reverse=True))
    raise ValueError(f"Unknown sort mode: {sort_mode!r}; expected one of {SORT_MODES}")


def day_key(ts: datetime) -> str:
    return to_local(ts).date().isoformat()


_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def day_label(key: str) -> str:
    """Render a grouping key as a section header, e.g. ``Sun Oct 18 2026``.

    Day and month names are fixed English abbreviations, independent of the
    process locale.
    """
    d = date.fromisoformat(key)
    return f"{_WEEKDAYS[d.weekday()]} {_MONTHS[d.month - 1]} {d.day:02d} {d.year}"


def group_by_day(expenses: Iterable[Expense]) -> Dict[str, List[Expense]]:
    grouped: Dict[str, List[Expense]] = {}
    for e in expenses:
        grouped.setdefault(day_key(e.date), []).append(e)
    return grouped


def flatten_groups(groups: Dict[str, List[Expense]]) -> Tuple[Expense, ...]:
    return tuple(e for items in groups.values() for e in items)


def expense_view(
    expenses: Iterable[Expense],
    category: str = "",
    search: str = "",
    sort_mode: str = LATEST,
) -> Dict[str, List[Expense]]:
    return pipe(
        expenses,
        partial(filter_by_category, category=category),
        partial(search_notes, search=search),
        partial(sort_expenses, sort_mode=sort_mode),
        group_by_day,
    )
