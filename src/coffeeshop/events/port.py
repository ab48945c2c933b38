"""EventSink port (abstract interface).

The core publishes every domain fact it produces to exactly one sink. The
sink is fire-and-forget: nothing in the core waits on, or retries, a publish.
"""

from abc import ABC, abstractmethod

from coffeeshop.events.record import EventRecord


class EventSink(ABC):
    """Abstract publish-only event sink."""

    @abstractmethod
    def publish(self, record: EventRecord) -> None:
        """Hand ``record`` to downstream consumers."""
        ...
