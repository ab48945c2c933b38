"""OrderStore — custom repository for the Order aggregate.

Reads go through the DAO query API page by page so callers always see every
matching order, not just the first page.
"""

from datetime import datetime

from protean.exceptions import ObjectNotFoundError

from coffeeshop.domain import coffeeshop
from coffeeshop.order.order import Order, OrderStatus, OrderType

_PAGE_SIZE = 100


@coffeeshop.repository(part_of=Order)
class OrderRepository:
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

    def save(self, order: Order) -> Order:
        self.add(order)
        return order

    def find_by_id(self, order_id: str) -> Order | None:
        try:
            return self.get(order_id)
        except ObjectNotFoundError:
            return None

    def find_all(self) -> list[Order]:
        return self._fetch()

    def find_by_status(self, status: OrderStatus | str) -> list[Order]:
        value = status.value if isinstance(status, OrderStatus) else status
        return self._fetch(status=value)

    def find_by_type(self, order_type: OrderType | str) -> list[Order]:
        value = order_type.value if isinstance(order_type, OrderType) else order_type
        return self._fetch(order_type=value)

    def find_by_created_at_between(self, start: datetime, end: datetime) -> list[Order]:
        """Orders created in ``[start, end]``, both ends included."""
        return [o for o in self._fetch() if o.created_at is not None and start <= o.created_at <= end]

    def delete_by_id(self, order_id: str) -> bool:
        order = self.find_by_id(order_id)
        if order is None:
            return False
        self._dao.delete(order)
        return True

    def exists_by_id(self, order_id: str) -> bool:
        return self.find_by_id(order_id) is not None
