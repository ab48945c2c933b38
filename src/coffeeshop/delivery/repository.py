"""DeliveryStore — custom repository for the Delivery aggregate.

Consistency contract: an order may belong to at most one delivery. The
repository answers "which delivery holds this order" by scanning delivery
items, so the check and the save that follows must run under a single
writer per order. ``DeliveryBatchEngine`` holds a process-wide lock around
that sequence; deployments with more than one writer process need a
provider that can enforce uniqueness on the order id.
"""

from datetime import datetime

from protean.exceptions import ObjectNotFoundError

from coffeeshop.delivery.delivery import Delivery, DeliveryStatus
from coffeeshop.domain import coffeeshop

_PAGE_SIZE = 100


@coffeeshop.repository(part_of=Delivery)
class DeliveryRepository:
    def _fetch(self, **filters) -> list:
        results: list = []
        offset = 0
        while True:
            query = self._dao.query.filter(**filters) if filters else self._dao.query
            page = query.offset(offset).limit(_PAGE_SIZE).all().items
            results.extend(page)
            if len(page) < _PAGE_SIZE:
                return results
            offset += _PAGE_SIZE

    def save(self, delivery: Delivery) -> Delivery:
        self.add(delivery)
        return delivery

    def find_by_id(self, delivery_id: str) -> Delivery | None:
        try:
            return self.get(delivery_id)
        except ObjectNotFoundError:
            return None

    def find_all(self) -> list[Delivery]:
        return self._fetch()

    def find_by_status(self, status: DeliveryStatus | str) -> list[Delivery]:
        value = status.value if isinstance(status, DeliveryStatus) else status
        return self._fetch(status=value)

    def find_by_rider_id(self, rider_id: str) -> list[Delivery]:
        return [d for d in self._fetch() if d.rider_info is not None and d.rider_info.rider_id == rider_id]

    def find_by_order_id(self, order_id: str) -> Delivery | None:
        """The delivery holding ``order_id``, if the order was ever batched."""
        order_id = str(order_id)
        return next((d for d in self._fetch() if order_id in d.order_ids), None)

    def batched_order_ids(self) -> set[str]:
        return {order_id for d in self._fetch() for order_id in d.order_ids}

    def find_active_deliveries(self) -> list[Delivery]:
        return [d for d in self._fetch() if d.is_active()]

    def find_deliveries_between(self, start: datetime, end: datetime) -> list[Delivery]:
        """Deliveries created in ``[start, end]``, both ends included."""
        return [d for d in self._fetch() if d.created_at is not None and start <= d.created_at <= end]

    def delete_by_id(self, delivery_id: str) -> bool:
        delivery = self.find_by_id(delivery_id)
        if delivery is None:
            return False
        self._dao.delete(delivery)
        return True

    def exists_by_id(self, delivery_id: str) -> bool:
        return self.find_by_id(delivery_id) is not None
