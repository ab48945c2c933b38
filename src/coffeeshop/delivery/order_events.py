"""Delivery reacts to Order events — notifications and the batching trigger.

When a delivery order's coffee is ready, the handler looks for other ready
orders going to the same address within the batching window and, if any are
found, sends them out together. Batching here is best-effort: a failure is
logged and the orders remain eligible for the next auto-batch run.
"""

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from coffeeshop.delivery.batching import DeliveryBatchEngine
from coffeeshop.delivery.delivery import Delivery
from coffeeshop.domain import coffeeshop
from coffeeshop.notifications import get_notifier
from coffeeshop.order.events import CoffeeReady, OrderCreated
from coffeeshop.order.order import Order, OrderType

logger = structlog.get_logger(__name__)


@coffeeshop.event_handler(part_of=Delivery, stream_category="coffeeshop::order")
class OrderEventHandler:
    """Reacts to events from the Order aggregate."""

    @handle(OrderCreated)
    def on_order_created(self, event: OrderCreated) -> None:
        get_notifier().notify_order_created(str(event.order_id), event.customer_name, event.order_type)

    @handle(CoffeeReady)
    def on_coffee_ready(self, event: CoffeeReady) -> None:
        get_notifier().notify_coffee_ready(str(event.order_id), event.customer_name, event.order_type)

        if event.order_type == OrderType.DELIVERY.value:
            self._check_for_batching(str(event.order_id))

    def _check_for_batching(self, order_id: str) -> Delivery | None:
        order = current_domain.repository_for(Order).find_by_id(order_id)
        if order is None:
            logger.warning("Ready order not found for batching", order_id=order_id)
            return None

        engine = DeliveryBatchEngine()
        peers = engine.find_batchable_orders_for(order, engine.find_batchable_orders())
        if not peers:
            logger.info("No batchable orders found", order_id=order_id)
            return None

        batch = [order, *peers][: DeliveryBatchEngine.MAX_ORDERS_PER_DELIVERY]
        try:
            delivery = engine.create_delivery_batch(batch)
        except ValidationError as exc:
            logger.warning("Automatic batching failed", order_id=order_id, reason=exc.messages)
            return None

        logger.info(
            "Automatically batched ready order",
            order_id=order_id,
            delivery_id=str(delivery.id),
            order_count=len(batch),
        )
        return delivery
