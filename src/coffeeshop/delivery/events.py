"""Delivery domain events — immutable facts about a delivery run.

All events are past tense and versioned. Order ids travel as a JSON list so
that consumers outside Python can read them without knowing the aggregate.
"""

from protean.fields import DateTime, Identifier, Integer, String, Text

from coffeeshop.domain import coffeeshop


@coffeeshop.event(part_of="Delivery")
class DeliveryCreated:
    """Ready orders were batched into a delivery run."""

    __version__ = 1

    delivery_id = Identifier(required=True)
    order_ids = Text(required=True)  # JSON list of order ids
    order_count = Integer(required=True)
    created_at = DateTime(required=True)


@coffeeshop.event(part_of="Delivery")
class DeliveryAssigned:
    """A rider accepted the delivery run."""

    __version__ = 1

    delivery_id = Identifier(required=True)
    rider_id = String(required=True)
    rider_name = String(required=True)
    vehicle_type = String()
    assigned_at = DateTime(required=True)


@coffeeshop.event(part_of="Delivery")
class DeliveryPickedUp:
    """The rider collected every order in the run from the counter."""

    __version__ = 1

    delivery_id = Identifier(required=True)
    picked_up_at = DateTime(required=True)


@coffeeshop.event(part_of="Delivery")
class DeliveryDelivered:
    """Every order in the run was handed over to its customer."""

    __version__ = 1

    delivery_id = Identifier(required=True)
    delivered_at = DateTime(required=True)


@coffeeshop.event(part_of="Delivery")
class DeliveryCompleted:
    """The rider closed the run."""

    __version__ = 1

    delivery_id = Identifier(required=True)
    completed_at = DateTime(required=True)
