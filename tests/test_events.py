import logging
from datetime import datetime

from tracker.events import (
    Event, EventBus,
    EXPENSE_ADDED, CATEGORY_ADDED, EVENT_NAMES,
    audit_handler, register_default_handlers,
)


def test_event_creation():
    event = Event(name=EXPENSE_ADDED, ts=datetime.now().isoformat(), payload={"amount": 5.0})
    assert event.name == EXPENSE_ADDED
    assert event.payload["amount"] == 5.0


def test_subscribe_and_publish():
    bus = EventBus()
    seen = []

    def handler(event: Event, payload: dict) -> dict:
        seen.append((event.name, payload))
        return {"processed": True}

    bus.subscribe(EXPENSE_ADDED, handler)
    results = bus.publish(EXPENSE_ADDED, {"amount": 5.0})

    assert results == [{"processed": True}]
    assert seen == [(EXPENSE_ADDED, {"amount": 5.0})]


def test_publish_without_subscribers():
    assert EventBus().publish(CATEGORY_ADDED, {}) == []


def test_handlers_run_in_subscription_order():
    bus = EventBus()
    bus.subscribe(EXPENSE_ADDED, lambda e, p: {"handler": 1})
    bus.subscribe(EXPENSE_ADDED, lambda e, p: {"handler": 2})
    assert bus.publish(EXPENSE_ADDED, {}) == [{"handler": 1}, {"handler": 2}]


def test_unsubscribe():
    bus = EventBus()

    def handler(event, payload):
        return {}

    bus.subscribe(EXPENSE_ADDED, handler)
    bus.unsubscribe(EXPENSE_ADDED, handler)
    assert bus.publish(EXPENSE_ADDED, {}) == []
    # unknown handler is ignored
    bus.unsubscribe(EXPENSE_ADDED, handler)


def test_register_default_handlers_once(caplog):
    bus = EventBus()
    register_default_handlers(bus)
    register_default_handlers(bus)
    for name in EVENT_NAMES:
        assert bus.subscribers(name) == [audit_handler]

    with caplog.at_level(logging.INFO, logger="tracker.events"):
        results = bus.publish(CATEGORY_ADDED, {"name": "Pets"})
    assert results == [{"logged": CATEGORY_ADDED}]
    assert CATEGORY_ADDED in caplog.text


def test_publish_stamps_event_with_bus_clock():
    bus = EventBus(clock=lambda: datetime(2026, 10, 18, 9, 30))
    bus.subscribe(EXPENSE_ADDED, lambda event, payload: {"ts": event.ts})
    assert bus.publish(EXPENSE_ADDED, {}) == [{"ts": "2026-10-18T09:30:00"}]


def test_handler_may_unsubscribe_while_publishing():
    bus = EventBus()
    calls = []

    def once(event, payload):
        bus.unsubscribe(EXPENSE_ADDED, once)
        calls.append("once")
        return {}

    bus.subscribe(EXPENSE_ADDED, once)
    bus.subscribe(EXPENSE_ADDED, lambda event, payload: calls.append("always") or {})
    bus.publish(EXPENSE_ADDED, {})
    bus.publish(EXPENSE_ADDED, {})
    assert calls == ["once", "always", "always"]
