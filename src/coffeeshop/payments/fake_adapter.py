"""Configurable fake payment gateway for development and testing.

Simulates the till without any external calls. It can be switched to fail at
runtime so tests can exercise declined payments and failed refunds.
"""

import structlog

from coffeeshop.payments.port import PaymentGateway
from coffeeshop.shared.money import Money

logger = structlog.get_logger(__name__)


class FakePaymentGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed

    def process_payment(self, order_id: str, amount: Money) -> bool:
        self.calls.append({"method": "process_payment", "order_id": order_id, "amount": amount.amount})
        logger.info("Processing payment", order_id=order_id, amount=amount.amount, success=self.should_succeed)
        return self.should_succeed

    def refund_payment(self, order_id: str, amount: Money) -> bool:
        self.calls.append({"method": "refund_payment", "order_id": order_id, "amount": amount.amount})
        logger.info("Refunding payment", order_id=order_id, amount=amount.amount, success=self.should_succeed)
        return self.should_succeed
