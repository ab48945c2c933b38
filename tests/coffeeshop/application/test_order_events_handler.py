"""Application tests for OrderEventHandler — Delivery reacts to Order events.

Covers:
- on_order_created: tells the customer the order was received
- on_coffee_ready: notifies, and batches a delivery order with its peers
- on_coffee_ready: leaves dine-in orders and lonely delivery orders alone
- on_coffee_ready: swallows batching failures
"""

from datetime import UTC, datetime, timedelta

from coffeeshop.delivery.batching import DeliveryBatchEngine
from coffeeshop.delivery.delivery import Delivery
from coffeeshop.delivery.order_events import OrderEventHandler
from coffeeshop.order.events import CoffeeReady, OrderCreated
from coffeeshop.order.order import Address, Order, OrderItem, OrderType
from coffeeshop.pricing.strategy import strategy_for
from coffeeshop.shared.money import Money
from protean import current_domain

BASE_TIME = datetime(2026, 5, 4, 9, 0, tzinfo=UTC)
STREET = ("14 Steamer Street", "Lisbon", "1100-014", "Portugal")


def _ready_order(customer, order_type=OrderType.DELIVERY, address=STREET, minutes=0):
    order = Order.create(
        customer,
        order_type,
        [OrderItem.of("Cold Brew", 1, Money.of(3.90))],
        Address.of(*address) if order_type == OrderType.DELIVERY else None,
    )
    order.settle(strategy_for(order.order_type))
    order.start_preparing()
    order.mark_as_ready()
    order.created_at = BASE_TIME + timedelta(minutes=minutes)
    order._events.clear()
    current_domain.repository_for(Order).add(order)
    return order


def _coffee_ready(order):
    return CoffeeReady(
        order_id=str(order.id),
        order_type=order.order_type,
        customer_name=order.customer_name,
        ready_at=BASE_TIME,
    )


def _deliveries():
    return current_domain.repository_for(Delivery).find_all()


class TestOrderCreated:
    def test_customer_is_told_order_was_received(self, notifier):
        OrderEventHandler().on_order_created(
            OrderCreated(order_id="ord-1", order_type="DINE_IN", customer_name="Carlos", created_at=BASE_TIME)
        )
        assert notifier.sent[0]["kind"] == "order_created"
        assert notifier.sent[0]["order_id"] == "ord-1"
        assert "Carlos" in notifier.sent[0]["message"]


class TestCoffeeReady:
    def test_customer_is_notified(self, notifier):
        order = _ready_order("Diana", order_type=OrderType.DINE_IN)
        OrderEventHandler().on_coffee_ready(_coffee_ready(order))
        assert [(n["kind"], n["order_id"]) for n in notifier.sent] == [("coffee_ready", str(order.id))]

    def test_delivery_order_is_batched_with_peers(self, event_sink):
        first = _ready_order("Diana", minutes=0)
        second = _ready_order("Elias", minutes=5)
        _ready_order("Far Away", minutes=40)

        OrderEventHandler().on_coffee_ready(_coffee_ready(second))

        deliveries = _deliveries()
        assert len(deliveries) == 1
        assert deliveries[0].order_ids[0] == str(second.id)
        assert sorted(deliveries[0].order_ids) == sorted([str(first.id), str(second.id)])
        assert event_sink.kinds() == ["DeliveryCreated"]

    def test_batch_is_capped(self):
        orders = [_ready_order(f"Customer {i}", minutes=i) for i in range(7)]

        OrderEventHandler().on_coffee_ready(_coffee_ready(orders[0]))

        deliveries = _deliveries()
        assert len(deliveries) == 1
        assert len(deliveries[0].items) == DeliveryBatchEngine.MAX_ORDERS_PER_DELIVERY

    def test_lonely_delivery_order_waits(self):
        order = _ready_order("Diana")
        _ready_order("Elsewhere", address=("1 Other Road", "Lisbon", "1100-999", "Portugal"))

        OrderEventHandler().on_coffee_ready(_coffee_ready(order))

        assert _deliveries() == []

    def test_dine_in_order_is_never_batched(self):
        order = _ready_order("Diana", order_type=OrderType.DINE_IN)
        _ready_order("Elias")

        OrderEventHandler().on_coffee_ready(_coffee_ready(order))

        assert _deliveries() == []

    def test_missing_order_is_ignored(self):
        ghost = CoffeeReady(order_id="ghost", order_type="DELIVERY", customer_name="Nobody", ready_at=BASE_TIME)
        OrderEventHandler().on_coffee_ready(ghost)
        assert _deliveries() == []

    def test_batching_failure_is_swallowed(self):
        order = _ready_order("Diana")
        _ready_order("Elias", minutes=2)
        DeliveryBatchEngine().create_delivery_batch([current_domain.repository_for(Order).get(order.id)])

        OrderEventHandler().on_coffee_ready(_coffee_ready(order))

        assert len(_deliveries()) == 1
