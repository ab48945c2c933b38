"""Order cancellation — command and handler.

Cancelling a priced order refunds its total. Cancelling an order a second time
is accepted but never refunds again. A refund the gateway rejects is
logged for follow-up by staff; the order stays cancelled.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from coffeeshop.domain import coffeeshop
from coffeeshop.events import save_and_publish
from coffeeshop.order.order import Order, OrderStatus
from coffeeshop.payments import get_gateway

logger = structlog.get_logger(__name__)


@coffeeshop.command(part_of="Order")
class CancelOrder:
    """Cancel an order that has not been completed."""

    order_id = Identifier(required=True)


@coffeeshop.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        already_cancelled = order.status == OrderStatus.CANCELLED.value
        order.cancel()
        save_and_publish(repo, order)

        if order.total_price is not None and not already_cancelled:
            refunded = get_gateway().refund_payment(str(order.id), order.total_price)
            if not refunded:
                logger.warning(
                    "Refund failed for cancelled order",
                    order_id=str(order.id),
                    amount=order.total_price.amount,
                )
