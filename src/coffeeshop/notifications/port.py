"""Notifier port (abstract interface) — customer-facing messages."""

from abc import ABC, abstractmethod


class Notifier(ABC):
    """Abstract customer notification channel."""

    @abstractmethod
    def notify_order_created(self, order_id: str, customer_name: str, order_type: str) -> bool: ...

    @abstractmethod
    def notify_coffee_ready(self, order_id: str, customer_name: str, order_type: str) -> bool: ...

    @abstractmethod
    def notify_order_completed(self, order_id: str, customer_name: str) -> bool: ...
