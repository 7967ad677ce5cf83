import threading
from collections import defaultdict
from copy import deepcopy
from typing import Optional

from ...domain import PersistenceException, ServiceOrder, ServiceOrderRepository


class InMemoryServiceOrderRepository(ServiceOrderRepository):
    """Stores detached copies so callers never share state with the store."""

    def __init__(self):
        self._orders: dict[str, ServiceOrder] = {}
        self._sequences: dict[str, int] = defaultdict(int)
        self._lock = threading.Lock()

    def save(self, order: ServiceOrder) -> None:
        with self._lock:
            stored = self._orders.get(order.id)
            stored_version = stored.version if stored is not None else 0
            if stored_version != order.version:
                raise PersistenceException.build(
                    "SAVE",
                    order.id,
                    "La orden fue modificada por otra operación.",
                    details=f"version esperada {stored_version}, recibida {order.version}"
                )
            order.version += 1
            snapshot = deepcopy(order)
            snapshot.events = []
            self._orders[order.id] = snapshot

    def find_by_id(self, order_id: str) -> Optional[ServiceOrder]:
        with self._lock:
            order = self._orders.get(order_id)
            return deepcopy(order) if order is not None else None

    def find_all(self) -> list[ServiceOrder]:
        with self._lock:
            return [deepcopy(order) for order in self._orders.values()]

    def exists(self, order_id: str) -> bool:
        with self._lock:
            return order_id in self._orders

    def delete(self, order_id: str) -> None:
        # payments, assignments, history and delivery notes live inside the aggregate
        with self._lock:
            self._orders.pop(order_id, None)

    def next_sequence(self, prefix: str) -> int:
        with self._lock:
            self._sequences[prefix] += 1
            return self._sequences[prefix]

    def clear(self) -> None:
        with self._lock:
            self._orders.clear()
            self._sequences.clear()
