"""Framework-free envelope for domain events handed to an EventSink."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True)
class EventRecord:
    """A published fact, tagged by its kind (e.g. ``"CoffeeReady"``)."""

    kind: str
    payload: dict[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_domain_event(cls, event) -> "EventRecord":
        payload = {k: v for k, v in event.to_dict().items() if not k.startswith("_")}
        return cls(kind=type(event).__name__, payload=payload)
