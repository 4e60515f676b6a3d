from datetime import datetime, timedelta, timezone

import pytest

from tracker.domain import Expense
from tracker.windows import (
    is_today,
    is_this_week,
    is_this_month,
    week_bounds,
    window_predicate,
    to_local,
    WINDOWS,
)

# Wednesday
NOW = datetime(2026, 10, 14, 12, 0)


def make_exp(ts, amount=10.0):
    return Expense(id="e", amount=amount, category="Food", date=ts)


def test_is_today_same_day():
    assert is_today(datetime(2026, 10, 14, 0, 0), NOW)
    assert is_today(datetime(2026, 10, 14, 23, 59, 59), NOW)


def test_is_today_other_day_or_year():
    assert not is_today(datetime(2026, 10, 13, 23, 59), NOW)
    assert not is_today(datetime(2025, 10, 14, 12, 0), NOW)


def test_week_bounds_start_on_sunday():
    start, end = week_bounds(NOW)
    assert start == datetime(2026, 10, 11, 0, 0)
    assert start.weekday() == 6
    assert end == datetime(2026, 10, 17, 23, 59, 59, 999000)


def test_week_bounds_when_now_is_sunday():
    start, end = week_bounds(datetime(2026, 10, 18, 8, 0))
    assert start == datetime(2026, 10, 18, 0, 0)
    assert end.date() == datetime(2026, 10, 24).date()


def test_is_this_week_edges():
    assert is_this_week(datetime(2026, 10, 11, 0, 0), NOW)
    assert is_this_week(datetime(2026, 10, 17, 23, 59, 59, 999000), NOW)
    assert not is_this_week(datetime(2026, 10, 10, 23, 59, 59), NOW)
    assert not is_this_week(datetime(2026, 10, 18, 0, 0), NOW)


def test_week_spanning_month_boundary():
    # Thursday Oct 1st 2026; the week started on Sunday Sep 27th
    now = datetime(2026, 10, 1, 9, 0)
    last_month = datetime(2026, 9, 28, 15, 0)
    assert is_this_week(last_month, now)
    assert not is_this_month(last_month, now)


def test_is_this_month():
    assert is_this_month(datetime(2026, 10, 1), NOW)
    assert is_this_month(datetime(2026, 10, 31, 23, 59), NOW)
    assert not is_this_month(datetime(2026, 9, 30, 23, 59), NOW)
    assert not is_this_month(datetime(2025, 10, 14), NOW)


def test_today_implies_month():
    for hour in range(0, 24, 3):
        ts = NOW.replace(hour=hour)
        assert is_today(ts, NOW)
        assert is_this_month(ts, NOW)


def test_aware_timestamps_compare_in_local_time():
    aware_now = NOW.astimezone()
    ts = (NOW - timedelta(hours=1)).astimezone(timezone.utc)
    assert to_local(ts) == NOW - timedelta(hours=1)
    assert is_today(ts, aware_now)
    assert is_today(ts, NOW)


def test_window_predicate_filters_records():
    recs = [
        make_exp(datetime(2026, 10, 14, 8, 0)),
        make_exp(datetime(2026, 10, 12, 8, 0)),
        make_exp(datetime(2026, 10, 2, 8, 0)),
        make_exp(datetime(2026, 9, 2, 8, 0)),
    ]
    assert len(list(filter(window_predicate("today", NOW), recs))) == 1
    assert len(list(filter(window_predicate("week", NOW), recs))) == 2
    assert len(list(filter(window_predicate("month", NOW), recs))) == 3


def test_window_predicate_unknown():
    with pytest.raises(ValueError, match="expected one of"):
        window_predicate("year", NOW)


def test_window_predicate_covers_every_window():
    rec = make_exp(NOW)
    for window in WINDOWS:
        assert window_predicate(window, NOW)(rec)
