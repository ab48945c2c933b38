"""Order aggregate (CQRS) — a customer's coffee order.

State Machine:
    CREATED → SETTLED → PREPARING → READY → COMPLETED
    {CREATED, SETTLED, PREPARING, READY, CANCELLED} → CANCELLED

Only DELIVERY orders carry an address. Settlement needs a pricing strategy,
so it has its own entry point and is never reachable through ``transition_to``.
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import invariant
from protean.exceptions import InvalidOperationError, ValidationError
from protean.fields import DateTime, HasMany, Integer, String, ValueObject

from coffeeshop.domain import coffeeshop
from coffeeshop.order.events import CoffeeReady, OrderCreated
from coffeeshop.shared.errors import InvalidStateTransition
from coffeeshop.shared.money import Money

UNKNOWN_ADDRESS = "UNKNOWN"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    CREATED = "CREATED"
    SETTLED = "SETTLED"
    PREPARING = "PREPARING"
    READY = "READY"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class OrderType(Enum):
    DINE_IN = "DINE_IN"
    DELIVERY = "DELIVERY"


_VALID_TRANSITIONS = {
    OrderStatus.CREATED: {OrderStatus.SETTLED, OrderStatus.CANCELLED},
    OrderStatus.SETTLED: {OrderStatus.PREPARING, OrderStatus.CANCELLED},
    OrderStatus.PREPARING: {OrderStatus.READY, OrderStatus.CANCELLED},
    OrderStatus.READY: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),  # terminal
    OrderStatus.CANCELLED: {OrderStatus.CANCELLED},
}


def _parse(enum_cls, value, field: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError({field: [f"Unknown {field.replace('_', ' ')}: {value}"]}) from None


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@coffeeshop.value_object(part_of="Order")
class Address:
    """Where a delivery order is taken. Compared by exact, trimmed text."""

    street = String(required=True, max_length=200)
    city = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)

    @classmethod
    def of(cls, street: str, city: str, postal_code: str, country: str) -> "Address":
        return cls(
            street=(street or "").strip(),
            city=(city or "").strip(),
            postal_code=(postal_code or "").strip(),
            country=(country or "").strip(),
        )

    @invariant.post
    def parts_must_not_be_blank(self):
        for name in ("street", "city", "postal_code", "country"):
            value = getattr(self, name)
            if value is None or not value.strip():
                raise ValidationError({name: [f"{name.replace('_', ' ').capitalize()} cannot be empty"]})

    def formatted(self) -> str:
        return f"{self.street}, {self.city}, {self.postal_code}, {self.country}"


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@coffeeshop.entity(part_of="Order")
class OrderItem:
    """A line on the order. The total is fixed when the line is built."""

    product_name = String(required=True, max_length=200)
    quantity = Integer(required=True, min_value=1)
    unit_price = ValueObject(Money, required=True)
    total_price = ValueObject(Money, required=True)

    @classmethod
    def of(cls, product_name: str, quantity: int, unit_price: Money) -> "OrderItem":
        name = (product_name or "").strip()
        if not name:
            raise ValidationError({"product_name": ["Product name cannot be empty"]})
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        if unit_price is None:
            raise ValidationError({"unit_price": ["Unit price is required"]})
        return cls(
            product_name=name,
            quantity=quantity,
            unit_price=unit_price,
            total_price=unit_price.multiply(quantity),
        )


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@coffeeshop.aggregate
class Order:
    customer_name = String(required=True, max_length=100)
    order_type = String(required=True, max_length=20, choices=OrderType)
    items = HasMany(OrderItem)
    address = ValueObject(Address)
    status = String(
        max_length=20,
        choices=OrderStatus,
        default=OrderStatus.CREATED.value,
    )
    total_price = ValueObject(Money)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def address_must_match_order_type(self):
        if self.order_type == OrderType.DELIVERY.value and self.address is None:
            raise ValidationError({"address": ["Delivery address is required for delivery orders"]})
        if self.order_type == OrderType.DINE_IN.value and self.address is not None:
            raise ValidationError({"address": ["Dine-in orders should not have a delivery address"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        customer_name: str,
        order_type: OrderType | str,
        items: list[OrderItem],
        address: Address | None = None,
    ):
        """Create a new order after checking every construction rule."""
        order_type = _parse(OrderType, order_type, "order_type")
        customer_name = (customer_name or "").strip()

        if not customer_name:
            raise ValidationError({"customer_name": ["Customer name cannot be empty"]})
        if not items:
            raise ValidationError({"items": ["Order must have at least one item"]})

        now = datetime.now(UTC)
        order = cls(
            customer_name=customer_name,
            order_type=order_type.value,
            items=list(items),
            address=address,
            status=OrderStatus.CREATED.value,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderCreated(
                order_id=str(order.id),
                order_type=order_type.value,
                customer_name=customer_name,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def is_delivery(self) -> bool:
        return self.order_type == OrderType.DELIVERY.value

    def address_key(self) -> str:
        """Exact-match key used to decide whether two orders share a drop-off."""
        return self.address.formatted() if self.address else UNKNOWN_ADDRESS

    def product_count(self) -> int:
        return sum(item.quantity for item in self.items or [])

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: OrderStatus) -> None:
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidStateTransition(current.value, target_status.value)

    def _stamp_updated_at(self) -> datetime:
        now = datetime.now(UTC)
        # Clock ties would leave updated_at unchanged between transitions
        if self.updated_at is not None and now <= self.updated_at:
            now = self.updated_at + timedelta(microseconds=1)
        self.updated_at = now
        return now

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def settle(self, strategy) -> None:
        """Price the order with ``strategy`` and lock in the total."""
        self._assert_can_transition(OrderStatus.SETTLED)
        if strategy is None:
            raise ValidationError({"pricing_strategy": ["Pricing strategy is required"]})

        total = strategy.calculate(self)
        self.total_price = total
        self.status = OrderStatus.SETTLED.value
        self._stamp_updated_at()

    def start_preparing(self) -> None:
        self._assert_can_transition(OrderStatus.PREPARING)
        self.status = OrderStatus.PREPARING.value
        self._stamp_updated_at()

    def mark_as_ready(self) -> None:
        self._assert_can_transition(OrderStatus.READY)
        self.status = OrderStatus.READY.value
        now = self._stamp_updated_at()
        self.raise_(
            CoffeeReady(
                order_id=str(self.id),
                order_type=self.order_type,
                customer_name=self.customer_name,
                ready_at=now,
            )
        )

    def complete(self) -> None:
        self._assert_can_transition(OrderStatus.COMPLETED)
        self.status = OrderStatus.COMPLETED.value
        self._stamp_updated_at()

    def cancel(self) -> None:
        """Cancel the order. Completed orders stay completed."""
        self._assert_can_transition(OrderStatus.CANCELLED)
        self.status = OrderStatus.CANCELLED.value
        self._stamp_updated_at()

    def transition_to(self, target: OrderStatus | str) -> None:
        """Route an external status request onto the matching lifecycle method."""
        target = _parse(OrderStatus, target, "status")
        if target == OrderStatus.SETTLED:
            raise InvalidOperationError("Use settle() with a pricing strategy to settle an order")

        handlers = {
            OrderStatus.PREPARING: self.start_preparing,
            OrderStatus.READY: self.mark_as_ready,
            OrderStatus.COMPLETED: self.complete,
            OrderStatus.CANCELLED: self.cancel,
        }
        handler = handlers.get(target)
        if handler is None:
            raise InvalidStateTransition(self.status, target.value)
        handler()
