import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union
from uuid import uuid4

from tracker.config import CATEGORIES_KEY, EXPENSES_KEY
from tracker.domain import DEFAULT_CATEGORIES, LATEST, Expense, Overview
from tracker.errors import StorageError, ValidationError
from tracker.events import (
    EventBus,
    CATEGORY_ADDED,
    DATA_REFRESHED,
    EXPENSE_ADDED,
    EXPENSES_CLEARED,
)
from tracker.functional import validate_category, validate_category_name, validate_expense_input
from tracker.pipeline import expense_view
from tracker.storage import KeyValueStore, read_document, write_document
from tracker.transforms import (
    compute_totals,
    decode_expenses,
    expense_to_dict,
    format_timestamp,
    parse_timestamp,
)

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def timestamp_id(ts: datetime) -> str:
    """Epoch milliseconds of ``ts`` plus a short random suffix."""
    return f"{int(ts.timestamp() * 1000)}-{uuid4().hex[:6]}"


class CategoryRegistry:
    """The user's category list, seeded with defaults until one is saved."""

    def __init__(self, store: KeyValueStore, defaults: Sequence[str] = DEFAULT_CATEGORIES):
        self.store = store
        self.defaults = tuple(defaults)
        self._categories: Optional[List[str]] = None

    @property
    def categories(self) -> Tuple[str, ...]:
        return tuple(self._categories if self._categories is not None else self.defaults)

    async def load(self) -> Tuple[str, ...]:
        data = await read_document(self.store, CATEGORIES_KEY)
        if data is None:
            self._categories = list(self.defaults)
        elif not isinstance(data, list) or not all(isinstance(c, str) for c in data):
            logger.warning("Stored categories are not a list of names; using defaults")
            self._categories = list(self.defaults)
        else:
            self._categories = list(data)
        return self.categories

    async def add(self, name: str) -> Tuple[str, ...]:
        cleaned = validate_category_name(name).get_or_raise(ValidationError.from_error)

        if self._categories is None:
            await self.load()
        self._categories.append(cleaned)

        try:
            await write_document(self.store, CATEGORIES_KEY, self._categories)
        except StorageError:
            logger.error("Category %r kept in memory but not saved", cleaned)
            raise

        logger.info("Added category %r", cleaned)
        return self.categories


class ExpenseLedger:
    """Append-only list of expenses persisted as one document.

    clock: returns the creation instant of new records
    id_factory: turns that instant into a record id
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[datetime], str] = timestamp_id,
    ):
        self.store = store
        self.clock = clock
        self.id_factory = id_factory

    async def load(self) -> Tuple[Expense, ...]:
        data = await read_document(self.store, EXPENSES_KEY)
        if data is None:
            return ()
        return decode_expenses(data)

    async def add(
        self,
        amount: Union[str, int, float],
        category: str,
        note: str = "",
    ) -> Expense:
        value, category = validate_expense_input(amount, category).get_or_raise(
            ValidationError.from_error
        )

        # stored precision and zone, so the record equals what load() returns
        ts = parse_timestamp(format_timestamp(self.clock()))
        expense = Expense(
            id=self.id_factory(ts),
            amount=value,
            category=category,
            date=ts,
            note=(note or "").strip(),
        )

        # existing entries are appended to as stored, never re-encoded
        stored = await read_document(self.store, EXPENSES_KEY, [], strict=True)
        if not isinstance(stored, list):
            logger.error("Stored expenses are a %s, not a list", type(stored).__name__)
            raise StorageError("Stored expenses are unreadable", key=EXPENSES_KEY)
        stored.append(expense_to_dict(expense))

        await write_document(self.store, EXPENSES_KEY, stored)
        logger.info("Saved expense %s: %.2f in %s", expense.id, expense.amount, expense.category)
        return expense

    async def clear_all(self) -> None:
        await self.store.remove(EXPENSES_KEY)
        logger.info("Cleared all expenses")


class ExpenseTracker:
    """Facade the presentation layer talks to.

    Views call :meth:`refresh` when they need fresh data and
    :meth:`subscribe` to hear about changes, instead of reloading on focus.
    """

    def __init__(
        self,
        store: KeyValueStore,
        bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = utc_now,
        defaults: Sequence[str] = DEFAULT_CATEGORIES,
    ):
        self.store = store
        self.bus = bus if bus is not None else EventBus()
        self.clock = clock
        self.ledger = ExpenseLedger(store, clock=clock)
        self.registry = CategoryRegistry(store, defaults=defaults)

    def subscribe(self, name: str, handler: Callable) -> None:
        self.bus.subscribe(name, handler)

    def unsubscribe(self, name: str, handler: Callable) -> None:
        self.bus.unsubscribe(name, handler)

    async def refresh(self, now: Optional[datetime] = None) -> Overview:
        expenses = await self.ledger.load()
        categories = await self.registry.load()
        overview = Overview(
            expenses=expenses,
            categories=categories,
            totals=compute_totals(expenses, now if now is not None else self.clock()),
        )
        self.bus.publish(DATA_REFRESHED, {
            "count": len(expenses),
            "totals": overview.totals._asdict(),
        })
        return overview

    async def add_expense(
        self,
        amount: Union[str, int, float],
        category: str,
        note: str = "",
    ) -> Expense:
        categories = await self.registry.load()
        validate_category(category, categories).get_or_raise(ValidationError.from_error)

        expense = await self.ledger.add(amount, category, note)
        self.bus.publish(EXPENSE_ADDED, {
            "id": expense.id,
            "amount": expense.amount,
            "category": expense.category,
        })
        return expense

    async def add_category(self, name: str) -> Tuple[str, ...]:
        categories = await self.registry.add(name)
        self.bus.publish(CATEGORY_ADDED, {"name": categories[-1], "count": len(categories)})
        return categories

    async def clear_all(self) -> None:
        await self.ledger.clear_all()
        self.bus.publish(EXPENSES_CLEARED, {})

    def view(
        self,
        expenses: Iterable[Expense],
        category: str = "",
        search: str = "",
        sort_mode: str = LATEST,
    ) -> Dict[str, List[Expense]]:
        return expense_view(expenses, category=category, search=search, sort_mode=sort_mode)
