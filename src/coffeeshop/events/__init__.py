"""Event sink factory.

Provides get_event_sink() / set_event_sink() to swap implementations:
- LoggingEventSink by default
- InMemoryEventSink for tests

The sink is never None. ``publish_raised()`` forwards whatever an aggregate
raised during a use case, once the aggregate has been handed to its store.
"""

import os

from coffeeshop.events.adapters import InMemoryEventSink, LoggingEventSink
from coffeeshop.events.port import EventSink
from coffeeshop.events.record import EventRecord

_current_sink: EventSink | None = None


def get_event_sink() -> EventSink:
    """Return the active event sink, chosen by EVENT_SINK (default ``log``)."""
    global _current_sink
    if _current_sink is None:
        adapter = os.environ.get("EVENT_SINK", "log")
        if adapter == "log":
            _current_sink = LoggingEventSink()
        elif adapter == "memory":
            _current_sink = InMemoryEventSink()
        else:
            raise ValueError(f"Unknown event sink: {adapter}")
    return _current_sink


def set_event_sink(sink: EventSink) -> None:
    """Override the active event sink (useful for tests)."""
    global _current_sink
    _current_sink = sink


def reset_event_sink() -> None:
    """Reset to default event sink."""
    global _current_sink
    _current_sink = None


def publish_raised(events: list, sink: EventSink | None = None) -> None:
    """Publish domain events captured from an aggregate's ``_events``."""
    sink = sink if sink is not None else get_event_sink()
    for event in events:
        sink.publish(EventRecord.from_domain_event(event))


def save_and_publish(repository, aggregate) -> None:
    """Persist ``aggregate`` and publish what it raised during this use case."""
    events = list(aggregate._events)
    repository.add(aggregate)
    publish_raised(events)
