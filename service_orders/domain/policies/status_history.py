from datetime import datetime
from typing import Optional

from ..entities.service_order import ServiceOrder
from ..entities.status_history_entry import StatusHistoryEntry
from ..enums import OrderStatus
from ..value_objects.money import Money


class StatusHistoryLog:
    """Append-only audit trail kept inside the order aggregate."""

    def append(
        self,
        order: ServiceOrder,
        status: OrderStatus,
        notes: str,
        actor_id: str,
        timestamp: datetime,
        presupuesto_amount: Optional[Money] = None
    ) -> StatusHistoryEntry:
        entry = StatusHistoryEntry.create(
            service_order_id=order.id,
            status=status,
            notes=notes,
            actor_id=actor_id,
            timestamp=timestamp,
            presupuesto_amount=presupuesto_amount
        )
        order.history.append(entry)
        return entry

    def list(self, order: ServiceOrder) -> list[StatusHistoryEntry]:
        # entries sharing a timestamp keep newest-first order
        return sorted(reversed(order.history), key=lambda e: e.timestamp, reverse=True)
