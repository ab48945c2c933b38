"""Order placement — command and handler.

Placing an order prices it, takes payment and sends it straight to the bar.
Nothing is stored when the payment is declined.
"""

import json

import structlog
from protean import handle
from protean.exceptions import InvalidOperationError
from protean.fields import String, Text
from protean.utils.globals import current_domain

from coffeeshop.domain import coffeeshop
from coffeeshop.events import save_and_publish
from coffeeshop.order.order import Address, Order, OrderItem, OrderType
from coffeeshop.payments import get_gateway
from coffeeshop.pricing.strategy import strategy_for
from coffeeshop.shared.money import Money

logger = structlog.get_logger(__name__)


@coffeeshop.command(part_of="Order")
class PlaceOrder:
    """Place, price and pay for a new order."""

    customer_name = String(required=True, max_length=100)
    order_type = String(required=True, max_length=20, choices=OrderType)
    items = Text(required=True)  # JSON list of {product_name, quantity, unit_price}
    address = Text()  # JSON {street, city, postal_code, country}; delivery orders only


def _load_json(value):
    if value is None or value == "":
        return None
    return json.loads(value) if isinstance(value, str) else value


def build_items(items_data: list[dict]) -> list[OrderItem]:
    return [
        OrderItem.of(
            product_name=data.get("product_name"),
            quantity=data.get("quantity"),
            unit_price=Money.of(data.get("unit_price", 0)),
        )
        for data in items_data or []
    ]


def build_address(address_data: dict | None) -> Address | None:
    if not address_data:
        return None
    return Address.of(
        street=address_data.get("street"),
        city=address_data.get("city"),
        postal_code=address_data.get("postal_code"),
        country=address_data.get("country"),
    )


@coffeeshop.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        order = Order.create(
            customer_name=command.customer_name,
            order_type=command.order_type,
            items=build_items(_load_json(command.items)),
            address=build_address(_load_json(command.address)),
        )
        order.settle(strategy_for(order.order_type))

        if not get_gateway().process_payment(str(order.id), order.total_price):
            logger.warning("Payment declined", order_id=str(order.id), amount=order.total_price.amount)
            raise InvalidOperationError(f"Payment processing failed for order {order.id}")

        order.start_preparing()
        save_and_publish(current_domain.repository_for(Order), order)
        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_type=order.order_type,
            total=order.total_price.amount,
        )
        return str(order.id)
