"""EventSink adapters — structured-log sink and in-memory recorder."""

import structlog

from coffeeshop.events.port import EventSink
from coffeeshop.events.record import EventRecord

logger = structlog.get_logger(__name__)


class LoggingEventSink(EventSink):
    """Writes each published event to the structured log."""

    def publish(self, record: EventRecord) -> None:
        logger.info("Domain event published", kind=record.kind, payload=record.payload)


class InMemoryEventSink(EventSink):
    """Keeps published events in order. Useful in tests and local runs."""

    def __init__(self) -> None:
        self.published: list[EventRecord] = []

    def publish(self, record: EventRecord) -> None:
        self.published.append(record)

    def kinds(self) -> list[str]:
        return [record.kind for record in self.published]

    def clear(self) -> None:
        self.published.clear()
