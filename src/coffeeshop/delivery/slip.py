"""Delivery slip — the rider's printed summary of a delivery run."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class DeliverySlipItem:
    order_id: str
    customer_name: str
    delivery_address: str
    product_names: tuple[str, ...]
    product_count: int
    item_status: str


@dataclass(frozen=True)
class DeliverySlip:
    delivery_id: str
    status: str
    rider_name: str | None
    created_at: datetime | None
    items: tuple[DeliverySlipItem, ...]

    @classmethod
    def from_delivery(cls, delivery) -> "DeliverySlip":
        items = tuple(
            DeliverySlipItem(
                order_id=str(item.order_id),
                customer_name=item.customer_name,
                delivery_address=item.delivery_address,
                product_names=tuple(item.products()),
                product_count=item.product_count or 0,
                item_status=item.item_status,
            )
            for item in delivery.items or []
        )
        return cls(
            delivery_id=str(delivery.id),
            status=delivery.status,
            rider_name=delivery.rider_info.rider_name if delivery.rider_info else None,
            created_at=delivery.created_at,
            items=items,
        )

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def total_product_count(self) -> int:
        return sum(item.product_count for item in self.items)
