"""Shared BDD fixtures and step definitions for orders and deliveries."""

from datetime import UTC, datetime, timedelta

import pytest
from coffeeshop.delivery.delivery import Delivery
from coffeeshop.delivery.events import (
    DeliveryAssigned,
    DeliveryCompleted,
    DeliveryCreated,
    DeliveryDelivered,
    DeliveryPickedUp,
)
from coffeeshop.order.events import CoffeeReady, OrderCreated
from coffeeshop.order.order import Address, Order, OrderItem, OrderType
from coffeeshop.pricing.strategy import strategy_for
from coffeeshop.shared.errors import InvalidStateTransition
from coffeeshop.shared.money import Money
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

_EVENT_CLASSES = {
    "OrderCreated": OrderCreated,
    "CoffeeReady": CoffeeReady,
    "DeliveryCreated": DeliveryCreated,
    "DeliveryAssigned": DeliveryAssigned,
    "DeliveryPickedUp": DeliveryPickedUp,
    "DeliveryDelivered": DeliveryDelivered,
    "DeliveryCompleted": DeliveryCompleted,
}

BASE_TIME = datetime(2026, 6, 1, 10, 0, tzinfo=UTC)


def lisbon_address(street):
    return Address.of(street, "Lisbon", "1000-001", "Portugal")


def ready_delivery_order(customer, street, created_at=BASE_TIME):
    order = Order.create(
        customer,
        OrderType.DELIVERY,
        [OrderItem.of("Latte", 1, Money.of(3.50))],
        lisbon_address(street),
    )
    order.settle(strategy_for(order.order_type))
    order.start_preparing()
    order.mark_as_ready()
    order.created_at = created_at
    order._events.clear()
    current_domain.repository_for(Order).add(order)
    return order


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@pytest.fixture()
def placed_orders():
    return []


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('{count:d} ready delivery orders to "{street}"'))
def ready_orders_to(placed_orders, count, street):
    for i in range(count):
        placed_orders.append(ready_delivery_order(f"Customer {i + 1}", street, BASE_TIME + timedelta(minutes=i)))


@given(parsers.cfparse('a ready delivery order to "{street}" placed {seconds:d} seconds after opening'))
def ready_order_at(placed_orders, street, seconds):
    placed_orders.append(
        ready_delivery_order(f"Customer {len(placed_orders) + 1}", street, BASE_TIME + timedelta(seconds=seconds))
    )


@given("a delivery created for those orders", target_fixture="delivery")
def delivery_for_placed_orders(placed_orders):
    delivery = Delivery.create(placed_orders)
    delivery._events.clear()
    return delivery


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert order.status == status


@then(parsers.cfparse('the delivery status is "{status}"'))
def delivery_status_is(delivery, status):
    assert delivery.status == status


@then("the action fails with an invalid transition")
def action_fails_with_invalid_transition(error):
    assert error["exc"] is not None, "Expected an invalid transition but none was raised"
    assert isinstance(error["exc"], InvalidStateTransition)


@then("the action fails with a validation error")
def action_fails_with_validation_error(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse("a {event_type} event is raised on the order"))
def order_event_raised(order, event_type):
    event_cls = _EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in order._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in order._events]}"


@then(parsers.cfparse("a {event_type} event is raised on the delivery"))
def delivery_event_raised(delivery, event_type):
    event_cls = _EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in delivery._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in delivery._events]}"
