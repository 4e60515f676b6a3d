from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple

LATEST = "latest"
HIGHEST = "highest"
SORT_MODES = (LATEST, HIGHEST)

DEFAULT_CATEGORIES = ("Food", "Transport", "Shopping", "Bills", "Other")


@dataclass(frozen=True)
class Expense:
    id: str
    amount: float      # always > 0
    category: str      # free text, never re-validated after creation
    date: datetime     # creation instant
    note: str = ""     # optional, trimmed


class Totals(NamedTuple):
    today: float
    week: float
    month: float


# Snapshot handed to the presentation layer after a refresh
@dataclass(frozen=True)
class Overview:
    expenses: tuple[Expense, ...]
    categories: tuple[str, ...]
    totals: Totals
