"""Classify timestamps against the today / this week / this month buckets.

Every function takes the reference instant ``now`` explicitly. Comparisons
happen in local time: aware datetimes are converted, naive ones are assumed
to be local already.
"""
from datetime import datetime, timedelta
from functools import partial
from typing import Callable

from tracker.domain import Expense
from tracker.functional import compose

# datetime.weekday() index of the first day of the week (Sunday)
FIRST_WEEKDAY = 6

TODAY = "today"
WEEK = "week"
MONTH = "month"
WINDOWS = (TODAY, WEEK, MONTH)


def to_local(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts
    return ts.astimezone().replace(tzinfo=None)


def week_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Return the first and last instant of the week containing ``now``."""
    local_now = to_local(now)
    days_since_start = (local_now.weekday() - FIRST_WEEKDAY) % 7
    start = (local_now - timedelta(days=days_since_start)).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    end = (start + timedelta(days=6)).replace(
        hour=23, minute=59, second=59, microsecond=999000
    )
    return start, end


def is_today(ts: datetime, now: datetime) -> bool:
    return to_local(ts).date() == to_local(now).date()


def is_this_week(ts: datetime, now: datetime) -> bool:
    start, end = week_bounds(now)
    return start <= to_local(ts) <= end


def is_this_month(ts: datetime, now: datetime) -> bool:
    d, n = to_local(ts), to_local(now)
    return d.year == n.year and d.month == n.month


_CLASSIFIERS = dict(zip(WINDOWS, (is_today, is_this_week, is_this_month)))


def window_predicate(window: str, now: datetime) -> Callable[[Expense], bool]:
    """Build a record predicate for one bucket, e.g. ``filter(window_predicate("week", now), expenses)``."""
    try:
        classifier = _CLASSIFIERS[window]
    except KeyError:
        raise ValueError(f"Unknown time window: {window!r}; expected one of {WINDOWS}") from None
    return compose(partial(classifier, now=now), lambda e: e.date)
