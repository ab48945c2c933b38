"""Delivery creation — commands and handler for batching orders into delivery runs."""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String, Text
from protean.utils.globals import current_domain

from coffeeshop.delivery.batching import DeliveryBatchEngine
from coffeeshop.delivery.delivery import Delivery
from coffeeshop.domain import coffeeshop
from coffeeshop.order.order import Order

logger = structlog.get_logger(__name__)


@coffeeshop.command(part_of="Delivery")
class CreateDeliveryBatch:
    """Put the given ready orders into one delivery run."""

    order_ids = Text(required=True)  # JSON list of order ids


@coffeeshop.command(part_of="Delivery")
class AutoBatchOrders:
    """Group every batchable ready order into delivery runs."""

    requested_by = String(max_length=100)


@coffeeshop.command_handler(part_of=Delivery)
class DeliveryCreationHandler:
    @handle(CreateDeliveryBatch)
    def create_delivery_batch(self, command):
        order_ids = json.loads(command.order_ids) if isinstance(command.order_ids, str) else command.order_ids
        orders_repo = current_domain.repository_for(Order)
        orders = [orders_repo.find_by_id(order_id) for order_id in order_ids or []]
        if any(order is None for order in orders):
            raise ValidationError({"order_ids": ["One or more orders not found"]})

        delivery = DeliveryBatchEngine(orders=orders_repo).create_delivery_batch(orders)
        return str(delivery.id)

    @handle(AutoBatchOrders)
    def auto_batch_orders(self, command):
        deliveries = DeliveryBatchEngine().auto_batch_orders()
        delivery_ids = [str(delivery.id) for delivery in deliveries]
        logger.info("Auto-batch requested", requested_by=command.requested_by, deliveries=len(delivery_ids))
        return delivery_ids
