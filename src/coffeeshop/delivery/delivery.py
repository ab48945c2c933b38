"""Delivery aggregate (CQRS) — a rider's multi-order delivery run.

State Machine:
    CREATED → ASSIGNED → PICKED_UP → IN_TRANSIT → DELIVERED → COMPLETED
    {CREATED, ASSIGNED} → CANCELLED

DeliveryItem sub-states move in lockstep with the run:
    READY → PICKED_UP (on pickup) → DELIVERED (on delivery)
"""

import json
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text, ValueObject

from coffeeshop.delivery.events import (
    DeliveryAssigned,
    DeliveryCompleted,
    DeliveryCreated,
    DeliveryDelivered,
    DeliveryPickedUp,
)
from coffeeshop.domain import coffeeshop
from coffeeshop.order.order import OrderStatus
from coffeeshop.shared.errors import InvalidStateTransition

DEFAULT_VEHICLE_TYPE = "BICYCLE"
MAX_ITEMS_PER_DELIVERY = 5


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class DeliveryStatus(Enum):
    CREATED = "CREATED"
    ASSIGNED = "ASSIGNED"
    PICKED_UP = "PICKED_UP"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class DeliveryItemStatus(Enum):
    READY = "READY"
    PICKED_UP = "PICKED_UP"
    DELIVERED = "DELIVERED"


_VALID_TRANSITIONS = {
    DeliveryStatus.CREATED: {DeliveryStatus.ASSIGNED, DeliveryStatus.CANCELLED},
    DeliveryStatus.ASSIGNED: {DeliveryStatus.PICKED_UP, DeliveryStatus.CANCELLED},
    DeliveryStatus.PICKED_UP: {DeliveryStatus.IN_TRANSIT},
    DeliveryStatus.IN_TRANSIT: {DeliveryStatus.DELIVERED},
    DeliveryStatus.DELIVERED: {DeliveryStatus.COMPLETED},
    DeliveryStatus.COMPLETED: set(),  # terminal
    DeliveryStatus.CANCELLED: set(),  # terminal
}

_ACTIVE_STATUSES = {
    DeliveryStatus.ASSIGNED,
    DeliveryStatus.PICKED_UP,
    DeliveryStatus.IN_TRANSIT,
}

_TERMINAL_STATUSES = {
    DeliveryStatus.COMPLETED,
    DeliveryStatus.CANCELLED,
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@coffeeshop.value_object(part_of="Delivery")
class RiderInfo:
    """The rider carrying a delivery run."""

    rider_id = String(required=True, max_length=100)
    rider_name = String(required=True, max_length=100)
    phone_number = String(required=True, max_length=30)
    vehicle_type = String(max_length=30, default=DEFAULT_VEHICLE_TYPE)

    @invariant.post
    def contact_details_must_not_be_blank(self):
        for name in ("rider_id", "rider_name", "phone_number"):
            value = getattr(self, name)
            if value is None or not value.strip():
                raise ValidationError({name: [f"{name.replace('_', ' ').capitalize()} cannot be empty"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@coffeeshop.entity(part_of="Delivery")
class DeliveryItem:
    """One order inside a delivery run.

    Carries a snapshot of the order taken when the run was formed, so slips
    can be printed without reloading every order.
    """

    order_id = Identifier(required=True)
    customer_name = String(max_length=100)
    delivery_address = String(max_length=500)
    product_names = Text()  # JSON list of product names
    product_count = Integer(default=0)
    item_status = String(
        max_length=20,
        choices=DeliveryItemStatus,
        default=DeliveryItemStatus.READY.value,
    )

    @classmethod
    def for_order(cls, order) -> "DeliveryItem":
        return cls(
            order_id=str(order.id),
            customer_name=order.customer_name,
            delivery_address=order.address_key(),
            product_names=json.dumps([item.product_name for item in order.items or []]),
            product_count=order.product_count(),
            item_status=DeliveryItemStatus.READY.value,
        )

    def products(self) -> list[str]:
        return json.loads(self.product_names) if self.product_names else []


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@coffeeshop.aggregate
class Delivery:
    items = HasMany(DeliveryItem)
    manifest = Text(required=True)  # JSON list of order ids, fixed at creation
    rider_info = ValueObject(RiderInfo)
    status = String(
        max_length=20,
        choices=DeliveryStatus,
        default=DeliveryStatus.CREATED.value,
    )
    pickup_time = DateTime()
    delivery_time = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def items_must_stay_within_capacity(self):
        count = len(self.items or [])
        if count < 1:
            raise ValidationError({"items": ["Delivery must have at least one item"]})
        if count > MAX_ITEMS_PER_DELIVERY:
            raise ValidationError(
                {"items": [f"Delivery cannot carry more than {MAX_ITEMS_PER_DELIVERY} orders"]}
            )

    @invariant.post
    def items_are_fixed_once_formed(self):
        if sorted(self.order_ids) != sorted(json.loads(self.manifest or "[]")):
            raise ValidationError({"items": ["Delivery items cannot change once the delivery is formed"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, orders: list):
        """Form a delivery run from orders that are all READY."""
        if not orders:
            raise ValidationError({"items": ["Delivery must have at least one item"]})

        for order in orders:
            if order.status != OrderStatus.READY.value:
                raise ValidationError(
                    {"orders": [f"All orders must be in READY state. Order {order.id} is in {order.status} state"]}
                )

        order_ids = [str(order.id) for order in orders]
        now = datetime.now(UTC)
        delivery = cls(
            items=[DeliveryItem.for_order(order) for order in orders],
            manifest=json.dumps(order_ids),
            status=DeliveryStatus.CREATED.value,
            created_at=now,
            updated_at=now,
        )
        delivery.raise_(
            DeliveryCreated(
                delivery_id=str(delivery.id),
                order_ids=json.dumps(order_ids),
                order_count=len(order_ids),
                created_at=now,
            )
        )
        return delivery

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def order_ids(self) -> list[str]:
        return [str(item.order_id) for item in self.items or []]

    def is_active(self) -> bool:
        return DeliveryStatus(self.status) in _ACTIVE_STATUSES

    def is_terminal(self) -> bool:
        return DeliveryStatus(self.status) in _TERMINAL_STATUSES

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: DeliveryStatus) -> None:
        current = DeliveryStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidStateTransition(current.value, target_status.value, kind="delivery")

    def _move_items(self, source: DeliveryItemStatus, target: DeliveryItemStatus) -> None:
        items = self.items or []
        for item in items:
            if item.item_status != source.value:
                raise InvalidStateTransition(item.item_status, target.value, kind="delivery item")
        for item in items:
            item.item_status = target.value

    def _stamp_updated_at(self) -> datetime:
        now = datetime.now(UTC)
        if self.updated_at is not None and now <= self.updated_at:
            now = self.updated_at + timedelta(microseconds=1)
        self.updated_at = now
        return now

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def assign_rider(self, rider_info: RiderInfo) -> None:
        """Hand the run to a rider. A run is assigned at most once."""
        self._assert_can_transition(DeliveryStatus.ASSIGNED)
        if rider_info is None:
            raise ValidationError({"rider_info": ["Rider info is required"]})

        self.rider_info = rider_info
        self.status = DeliveryStatus.ASSIGNED.value
        now = self._stamp_updated_at()
        self.raise_(
            DeliveryAssigned(
                delivery_id=str(self.id),
                rider_id=rider_info.rider_id,
                rider_name=rider_info.rider_name,
                vehicle_type=rider_info.vehicle_type,
                assigned_at=now,
            )
        )

    def mark_as_picked_up(self) -> None:
        self._assert_can_transition(DeliveryStatus.PICKED_UP)
        self._move_items(DeliveryItemStatus.READY, DeliveryItemStatus.PICKED_UP)
        self.status = DeliveryStatus.PICKED_UP.value
        now = self._stamp_updated_at()
        self.pickup_time = now
        self.raise_(DeliveryPickedUp(delivery_id=str(self.id), picked_up_at=now))

    def mark_as_in_transit(self) -> None:
        self._assert_can_transition(DeliveryStatus.IN_TRANSIT)
        self.status = DeliveryStatus.IN_TRANSIT.value
        self._stamp_updated_at()

    def mark_as_delivered(self) -> None:
        self._assert_can_transition(DeliveryStatus.DELIVERED)
        self._move_items(DeliveryItemStatus.PICKED_UP, DeliveryItemStatus.DELIVERED)
        self.status = DeliveryStatus.DELIVERED.value
        now = self._stamp_updated_at()
        self.delivery_time = now
        self.raise_(DeliveryDelivered(delivery_id=str(self.id), delivered_at=now))

    def complete(self) -> None:
        self._assert_can_transition(DeliveryStatus.COMPLETED)
        self.status = DeliveryStatus.COMPLETED.value
        now = self._stamp_updated_at()
        self.raise_(DeliveryCompleted(delivery_id=str(self.id), completed_at=now))

    def cancel(self) -> None:
        """Cancel the run. Not possible once the rider has the orders."""
        self._assert_can_transition(DeliveryStatus.CANCELLED)
        self.status = DeliveryStatus.CANCELLED.value
        self._stamp_updated_at()
