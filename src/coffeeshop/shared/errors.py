"""Errors shared by the Order and Delivery state machines."""

from protean.exceptions import ValidationError


class InvalidStateTransition(ValidationError):
    """A lifecycle method was called from a status that does not allow it.

    Subclasses ValidationError so callers that only care about rejected input
    can keep catching that, while state-machine aware callers can read the
    statuses involved.
    """

    def __init__(self, current_status: str, target_status: str, kind: str = "order"):
        self.current_status = current_status
        self.target_status = target_status
        super().__init__({"status": [f"Cannot transition {kind} from {current_status} to {target_status}"]})
