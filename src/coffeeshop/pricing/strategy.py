"""Pricing strategies — how an order's total is computed at settlement.

The strategy is picked by order type. Dine-in orders pay for their items;
delivery orders also pay a packaging and a delivery fee.
"""

from abc import ABC, abstractmethod
from decimal import Decimal

from protean.exceptions import ConfigurationError

from coffeeshop.order.order import OrderType
from coffeeshop.shared.money import Money


class PricingStrategy(ABC):
    """Computes the amount owed for an order."""

    @abstractmethod
    def calculate(self, order) -> Money:
        """Return the total for ``order``. Must not mutate the order."""
        ...

    @staticmethod
    def items_total(order) -> Money:
        total = Money.zero()
        for item in order.items or []:
            total = total.add(item.total_price)
        return total


class DineInPricingStrategy(PricingStrategy):
    def calculate(self, order) -> Money:
        return self.items_total(order)


class DeliveryPricingStrategy(PricingStrategy):
    PACKAGING_FEE = Decimal("2.00")
    DELIVERY_FEE = Decimal("5.00")

    def calculate(self, order) -> Money:
        return self.items_total(order).add(Money.of(self.PACKAGING_FEE)).add(Money.of(self.DELIVERY_FEE))


_STRATEGIES: dict[OrderType, PricingStrategy] = {
    OrderType.DINE_IN: DineInPricingStrategy(),
    OrderType.DELIVERY: DeliveryPricingStrategy(),
}


def strategy_for(order_type: OrderType | str) -> PricingStrategy:
    """Return the strategy registered for ``order_type``."""
    try:
        key = order_type if isinstance(order_type, OrderType) else OrderType(order_type)
        return _STRATEGIES[key]
    except (KeyError, ValueError):
        raise ConfigurationError(f"No pricing strategy found for order type: {order_type}") from None
