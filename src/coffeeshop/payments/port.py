"""Payment gateway port (abstract interface).

Defines the contract that payment adapters implement. Both calls report the
outcome as a plain bool; the order use cases decide what a failure means.
"""

from abc import ABC, abstractmethod

from coffeeshop.shared.money import Money


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def process_payment(self, order_id: str, amount: Money) -> bool:
        """Charge ``amount`` for the order. True when the charge went through."""
        ...

    @abstractmethod
    def refund_payment(self, order_id: str, amount: Money) -> bool:
        """Refund ``amount`` for the order. True when the refund went through."""
        ...
