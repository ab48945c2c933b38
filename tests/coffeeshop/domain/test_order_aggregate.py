"""Tests for Order creation rules, order items and addresses."""

import pytest
from coffeeshop.order.events import OrderCreated
from coffeeshop.order.order import Address, Order, OrderItem, OrderStatus, OrderType
from coffeeshop.shared.money import Money
from protean.exceptions import ValidationError


def _address(**overrides):
    data = {"street": "12 Bean Street", "city": "Lisbon", "postal_code": "1100-001", "country": "Portugal"}
    data.update(overrides)
    return Address.of(**data)


def _items():
    return [OrderItem.of("Flat White", 2, Money.of(3.50)), OrderItem.of("Croissant", 1, Money.of(2.25))]


class TestOrderItem:
    def test_total_is_unit_price_times_quantity(self):
        item = OrderItem.of("Latte", 3, Money.of(4.20))
        assert item.total_price == Money.of(12.60)

    def test_product_name_is_trimmed(self):
        item = OrderItem.of("  Mocha  ", 1, Money.of(4))
        assert item.product_name == "Mocha"

    def test_blank_product_name_rejected(self):
        with pytest.raises(ValidationError):
            OrderItem.of("   ", 1, Money.of(4))

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity_rejected(self, quantity):
        with pytest.raises(ValidationError):
            OrderItem.of("Latte", quantity, Money.of(4))

    def test_missing_unit_price_rejected(self):
        with pytest.raises(ValidationError):
            OrderItem.of("Latte", 1, None)


class TestAddress:
    def test_parts_are_trimmed(self):
        address = Address.of("  12 Bean Street ", " Lisbon", "1100-001 ", " Portugal ")
        assert address.street == "12 Bean Street"
        assert address.city == "Lisbon"
        assert address.postal_code == "1100-001"
        assert address.country == "Portugal"

    def test_equal_by_value(self):
        assert _address() == _address(street=" 12 Bean Street ")

    def test_blank_part_rejected(self):
        with pytest.raises(ValidationError):
            _address(city="   ")

    def test_formatted(self):
        assert _address().formatted() == "12 Bean Street, Lisbon, 1100-001, Portugal"


class TestOrderCreation:
    def test_dine_in_order(self):
        order = Order.create("Ana", OrderType.DINE_IN, _items())
        assert order.status == OrderStatus.CREATED.value
        assert order.order_type == OrderType.DINE_IN.value
        assert order.address is None
        assert order.total_price is None
        assert len(order.items) == 2
        assert order.created_at == order.updated_at

    def test_delivery_order(self):
        order = Order.create("Ben", OrderType.DELIVERY, _items(), _address())
        assert order.is_delivery
        assert order.address == _address()

    def test_accepts_type_name(self):
        order = Order.create("Ana", "DINE_IN", _items())
        assert order.order_type == "DINE_IN"

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            Order.create("Ana", "TAKEAWAY", _items())

    def test_customer_name_is_trimmed(self):
        order = Order.create("  Ana ", OrderType.DINE_IN, _items())
        assert order.customer_name == "Ana"

    def test_blank_customer_name_rejected(self):
        with pytest.raises(ValidationError) as exc:
            Order.create("  ", OrderType.DINE_IN, _items())
        assert "customer_name" in exc.value.messages

    def test_no_items_rejected(self):
        with pytest.raises(ValidationError) as exc:
            Order.create("Ana", OrderType.DINE_IN, [])
        assert "Order must have at least one item" in str(exc.value)

    def test_delivery_without_address_rejected(self):
        with pytest.raises(ValidationError) as exc:
            Order.create("Ben", OrderType.DELIVERY, _items())
        assert "address" in exc.value.messages

    def test_dine_in_with_address_rejected(self):
        with pytest.raises(ValidationError) as exc:
            Order.create("Ana", OrderType.DINE_IN, _items(), _address())
        assert "address" in exc.value.messages

    def test_order_created_event_raised(self):
        order = Order.create("Ben", OrderType.DELIVERY, _items(), _address())
        assert len(order._events) == 1
        event = order._events[0]
        assert isinstance(event, OrderCreated)
        assert event.order_id == str(order.id)
        assert event.order_type == "DELIVERY"
        assert event.customer_name == "Ben"

    def test_orders_get_distinct_ids(self):
        first = Order.create("Ana", OrderType.DINE_IN, _items())
        second = Order.create("Ana", OrderType.DINE_IN, _items())
        assert first.id != second.id


class TestAddressMatchesOrderType:
    def test_direct_dine_in_with_address_rejected(self):
        with pytest.raises(ValidationError) as exc:
            Order(customer_name="Ana", order_type="DINE_IN", items=_items(), address=_address())
        assert "address" in exc.value.messages

    def test_direct_delivery_without_address_rejected(self):
        with pytest.raises(ValidationError) as exc:
            Order(customer_name="Ben", order_type="DELIVERY", items=_items())
        assert "address" in exc.value.messages

    def test_address_cannot_be_added_to_dine_in_order(self):
        order = Order.create("Ana", OrderType.DINE_IN, _items())
        with pytest.raises(ValidationError):
            order.address = _address()

    def test_address_cannot_be_removed_from_delivery_order(self):
        order = Order.create("Ben", OrderType.DELIVERY, _items(), _address())
        with pytest.raises(ValidationError):
            order.address = None


class TestOrderQueries:
    def test_address_key_for_delivery(self):
        order = Order.create("Ben", OrderType.DELIVERY, _items(), _address())
        assert order.address_key() == "12 Bean Street, Lisbon, 1100-001, Portugal"

    def test_address_key_without_address(self):
        order = Order.create("Ana", OrderType.DINE_IN, _items())
        assert order.address_key() == "UNKNOWN"

    def test_product_count_sums_quantities(self):
        order = Order.create("Ana", OrderType.DINE_IN, _items())
        assert order.product_count() == 3
