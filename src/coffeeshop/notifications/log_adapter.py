"""Notifier that writes messages to the structured log and remembers them."""

import structlog

from coffeeshop.notifications.port import Notifier

logger = structlog.get_logger(__name__)


class LoggingNotifier(Notifier):
    def __init__(self) -> None:
        self.sent: list[dict] = []

    def _send(self, kind: str, order_id: str, message: str) -> bool:
        self.sent.append({"kind": kind, "order_id": order_id, "message": message})
        logger.info("Notification sent", kind=kind, order_id=order_id, message=message)
        return True

    def notify_order_created(self, order_id: str, customer_name: str, order_type: str) -> bool:
        return self._send(
            "order_created",
            order_id,
            f"Hi {customer_name}, we received your {order_type.replace('_', '-').lower()} order.",
        )

    def notify_coffee_ready(self, order_id: str, customer_name: str, order_type: str) -> bool:
        if order_type == "DELIVERY":
            message = f"Hi {customer_name}, your coffee is ready and will be on its way shortly."
        else:
            message = f"Hi {customer_name}, your coffee is ready at the counter."
        return self._send("coffee_ready", order_id, message)

    def notify_order_completed(self, order_id: str, customer_name: str) -> bool:
        return self._send("order_completed", order_id, f"Thanks {customer_name}, enjoy your coffee!")
