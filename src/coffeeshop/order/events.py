"""Order domain events — immutable facts about an order's lifecycle."""

from protean.fields import DateTime, Identifier, String

from coffeeshop.domain import coffeeshop


@coffeeshop.event(part_of="Order")
class OrderCreated:
    """An order was accepted at the counter or online."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_type = String(required=True)
    customer_name = String(required=True)
    created_at = DateTime(required=True)


@coffeeshop.event(part_of="Order")
class CoffeeReady:
    """The barista finished an order and it is waiting for pickup."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_type = String(required=True)
    customer_name = String(required=True)
    ready_at = DateTime(required=True)
