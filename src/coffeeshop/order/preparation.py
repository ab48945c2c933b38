"""Order preparation — commands and handler for the bar and the counter."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from coffeeshop.domain import coffeeshop
from coffeeshop.events import save_and_publish
from coffeeshop.notifications import get_notifier
from coffeeshop.order.order import Order, OrderStatus


@coffeeshop.command(part_of="Order")
class MarkCoffeeReady:
    """The barista finished the order."""

    order_id = Identifier(required=True)


@coffeeshop.command(part_of="Order")
class CompleteOrder:
    """The customer has their coffee."""

    order_id = Identifier(required=True)


@coffeeshop.command(part_of="Order")
class UpdateOrderStatus:
    """Move an order to a status by name. Settlement is not available here."""

    order_id = Identifier(required=True)
    status = String(required=True, max_length=20, choices=OrderStatus)


@coffeeshop.command_handler(part_of=Order)
class OrderPreparationHandler:
    @handle(MarkCoffeeReady)
    def mark_coffee_ready(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_as_ready()
        save_and_publish(repo, order)

    @handle(CompleteOrder)
    def complete_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.complete()
        save_and_publish(repo, order)
        get_notifier().notify_order_completed(str(order.id), order.customer_name)

    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.transition_to(command.status)
        save_and_publish(repo, order)
