import logging
from collections import defaultdict
from typing import Callable, Dict, List, NamedTuple
from datetime import datetime

__all__ = [
    'event_bus', 'EXPENSE_ADDED', 'CATEGORY_ADDED', 'EXPENSES_CLEARED', 'DATA_REFRESHED',
    'EVENT_NAMES', 'Event', 'EventBus', 'Handler', 'audit_handler', 'register_default_handlers',
]

logger = logging.getLogger(__name__)


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    """Synchronous publish/subscribe keyed by event name.

    Handlers run in subscription order; ``publish`` returns their results.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)
        self._clock = clock

    def subscribe(self, name: str, handler: Handler) -> None:
        self._handlers[name].append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        handlers = self._handlers.get(name, [])
        if handler in handlers:
            handlers.remove(handler)

    def subscribers(self, name: str) -> List[Handler]:
        return list(self._handlers.get(name, ()))

    def publish(self, name: str, payload: dict) -> List[dict]:
        # snapshot, so a handler may unsubscribe itself mid-publish
        handlers = self.subscribers(name)
        if not handlers:
            return []
        event = Event(name=name, ts=self._clock().isoformat(), payload=payload)
        return [handler(event, payload) for handler in handlers]


EXPENSE_ADDED = "EXPENSE_ADDED"
CATEGORY_ADDED = "CATEGORY_ADDED"
EXPENSES_CLEARED = "EXPENSES_CLEARED"
DATA_REFRESHED = "DATA_REFRESHED"
EVENT_NAMES = (EXPENSE_ADDED, CATEGORY_ADDED, EXPENSES_CLEARED, DATA_REFRESHED)

event_bus = EventBus()


def audit_handler(event: Event, payload: dict) -> dict:
    logger.info("%s at %s: %s", event.name, event.ts, sorted(payload))
    return {"logged": event.name}


def register_default_handlers(bus: EventBus = event_bus) -> None:
    for name in EVENT_NAMES:
        if audit_handler not in bus.subscribers(name):
            bus.subscribe(name, audit_handler)
