import logging
from datetime import datetime, timezone
from functools import reduce
from typing import Any, Iterable, Tuple

from tracker.domain import Expense, Totals
from tracker.windows import is_today, is_this_week, is_this_month

logger = logging.getLogger(__name__)


def format_timestamp(ts: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. ``2026-10-18T09:30:00.000Z``."""
    if ts.tzinfo is None:
        ts = ts.astimezone()
    utc = ts.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def parse_timestamp(text: str) -> datetime:
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def expense_to_dict(e: Expense) -> dict:
    return {
        "id": e.id,
        "amount": e.amount,
        "category": e.category,
        "note": e.note,
        "date": format_timestamp(e.date),
    }


def expense_from_dict(data: dict) -> Expense:
    """Build a record from its JSON shape.

    Raises KeyError, TypeError or ValueError when a required field is
    missing or malformed.
    """
    return Expense(
        id=str(data["id"]),
        amount=float(data["amount"]),
        category=str(data.get("category") or ""),
        date=parse_timestamp(data["date"]),
        note=str(data.get("note") or ""),
    )


def decode_expenses(raw: Any) -> Tuple[Expense, ...]:
    if not isinstance(raw, list):
        logger.warning("Expected a list of expenses, got %s; ignoring", type(raw).__name__)
        return ()

    records = []
    for i, item in enumerate(raw):
        try:
            records.append(expense_from_dict(item))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Skipping malformed expense at index %d: %s", i, e)
    return tuple(records)


def compute_totals(expenses: Iterable[Expense], now: datetime) -> Totals:
    """Sum amounts into the today / week / month buckets relative to ``now``.

    A record counts in every bucket it falls in.
    """
    def _add(acc: Totals, e: Expense) -> Totals:
        return Totals(
            today=acc.today + (e.amount if is_today(e.date, now) else 0.0),
            week=acc.week + (e.amount if is_this_week(e.date, now) else 0.0),
            month=acc.month + (e.amount if is_this_month(e.date, now) else 0.0),
        )

    return reduce(_add, expenses, Totals(0.0, 0.0, 0.0))
