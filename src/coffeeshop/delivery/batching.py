"""Delivery batch engine — groups ready delivery orders into delivery runs.

An order can join a run when it is a READY delivery order that no run holds
yet, it goes to exactly the same address as the run, and it was placed within
``BATCHING_TIME_WINDOW`` of the run's first order. A run never carries more
than ``MAX_ORDERS_PER_DELIVERY`` orders.

``auto_batch_orders`` groups by address first and by time second, so orders
for one address are never split just because another address' orders fall
between them.
"""

import threading
from datetime import datetime, timedelta

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from coffeeshop.delivery.delivery import MAX_ITEMS_PER_DELIVERY, Delivery
from coffeeshop.events import get_event_sink, publish_raised
from coffeeshop.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


class DeliveryBatchEngine:
    MAX_ORDERS_PER_DELIVERY = MAX_ITEMS_PER_DELIVERY
    BATCHING_TIME_WINDOW = timedelta(minutes=15)

    # Serializes the "not yet batched" check with the save that follows
    _lock = threading.RLock()

    def __init__(self, orders=None, deliveries=None, event_sink=None):
        self.orders = orders if orders is not None else current_domain.repository_for(Order)
        self.deliveries = deliveries if deliveries is not None else current_domain.repository_for(Delivery)
        self.event_sink = event_sink if event_sink is not None else get_event_sink()

    def _within_window(self, moment: datetime, reference: datetime) -> bool:
        return abs(moment - reference) <= self.BATCHING_TIME_WINDOW

    # -------------------------------------------------------------------
    # Explicit batching
    # -------------------------------------------------------------------
    def create_delivery_batch(self, orders: list[Order]) -> Delivery:
        """Create one delivery for ``orders``, or nothing at all.

        Raises ValidationError when the list is empty or too large, or when
        any order is not a READY delivery order or already sits in a delivery.
        """
        if not orders:
            raise ValidationError({"orders": ["Orders cannot be empty"]})
        if len(orders) > self.MAX_ORDERS_PER_DELIVERY:
            raise ValidationError(
                {"orders": [f"Cannot batch more than {self.MAX_ORDERS_PER_DELIVERY} orders in a single delivery"]}
            )

        with self._lock:
            batched = self.deliveries.batched_order_ids()
            seen: set[str] = set()
            for order in orders:
                order_id = str(order.id)
                if not order.is_delivery:
                    raise ValidationError({"orders": [f"Order {order_id} is not a delivery order"]})
                if order.status != OrderStatus.READY.value:
                    raise ValidationError(
                        {"orders": [f"Order {order_id} is not in READY state. Current status: {order.status}"]}
                    )
                if order_id in batched:
                    raise ValidationError({"orders": [f"Order {order_id} is already in a delivery"]})
                if order_id in seen:
                    raise ValidationError({"orders": [f"Order {order_id} appears more than once"]})
                seen.add(order_id)

            delivery = Delivery.create(orders)
            events = list(delivery._events)
            self.deliveries.save(delivery)

        publish_raised(events, self.event_sink)
        logger.info(
            "Delivery batch created",
            delivery_id=str(delivery.id),
            order_ids=delivery.order_ids,
            order_count=len(orders),
        )
        return delivery

    # -------------------------------------------------------------------
    # Eligibility
    # -------------------------------------------------------------------
    def find_batchable_orders(self) -> list[Order]:
        """READY delivery orders that no delivery holds yet."""
        batched = self.deliveries.batched_order_ids()
        return [
            order
            for order in self.orders.find_by_status(OrderStatus.READY)
            if order.is_delivery and str(order.id) not in batched
        ]

    def can_batch_with(self, order: Order, peers: list[Order]) -> bool:
        """Whether ``order`` could ride along with ``peers``."""
        if not peers:
            return False
        if not order.is_delivery or order.status != OrderStatus.READY.value:
            return False
        if len(peers) >= self.MAX_ORDERS_PER_DELIVERY:
            return False

        earliest = min(peer.created_at for peer in peers)
        if not self._within_window(order.created_at, earliest):
            return False
        if order.address_key() != peers[0].address_key():
            return False

        return self.deliveries.find_by_order_id(str(order.id)) is None

    def find_batchable_orders_for(self, reference: Order, candidates: list[Order]) -> list[Order]:
        return [
            candidate
            for candidate in candidates
            if str(candidate.id) != str(reference.id) and self.can_batch_with(candidate, [reference])
        ]

    # -------------------------------------------------------------------
    # Bulk batching
    # -------------------------------------------------------------------
    def auto_batch_orders(self) -> list[Delivery]:
        """Batch every eligible order. Returns the deliveries in creation order.

        A batch that fails validation when flushed is dropped and its orders
        are not retried in the same pass; they stay eligible for the next one.
        """
        eligible = sorted(self.find_batchable_orders(), key=lambda o: o.created_at)

        by_address: dict[str, list[Order]] = {}
        for order in eligible:
            by_address.setdefault(order.address_key(), []).append(order)

        created: list[Delivery] = []
        for group in by_address.values():
            batch: list[Order] = []
            batch_start: datetime | None = None

            for order in group:
                if batch_start is None or self._within_window(order.created_at, batch_start):
                    if batch_start is None:
                        batch_start = order.created_at
                    batch.append(order)
                    if len(batch) >= self.MAX_ORDERS_PER_DELIVERY:
                        self._flush(batch, created)
                        batch, batch_start = [], None
                else:
                    if batch:
                        self._flush(batch, created)
                    batch, batch_start = [order], order.created_at

            if batch:
                self._flush(batch, created)

        logger.info("Auto-batching finished", eligible=len(eligible), deliveries=len(created))
        return created

    def _flush(self, batch: list[Order], created: list[Delivery]) -> None:
        try:
            created.append(self.create_delivery_batch(list(batch)))
        except ValidationError as exc:
            logger.warning(
                "Dropping delivery batch",
                order_ids=[str(o.id) for o in batch],
                reason=exc.messages,
            )
