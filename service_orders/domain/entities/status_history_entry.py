from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

from ..enums import OrderStatus
from ..value_objects.money import Money


@dataclass(frozen=True)
class StatusHistoryEntry:
    id: str
    service_order_id: str
    status: OrderStatus
    notes: str
    created_by: str
    timestamp: datetime
    presupuesto_amount: Optional[Money] = None

    @classmethod
    def create(
        cls,
        service_order_id: str,
        status: OrderStatus,
        notes: str,
        actor_id: str,
        timestamp: datetime,
        presupuesto_amount: Optional[Money] = None
    ) -> 'StatusHistoryEntry':
        return cls(
            id=str(uuid4()),
            service_order_id=service_order_id,
            status=status,
            notes=notes,
            created_by=actor_id,
            timestamp=timestamp,
            presupuesto_amount=presupuesto_amount
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "service_order_id": self.service_order_id,
            "status": self.status.value,
            "notes": self.notes,
            "presupuesto_amount": str(self.presupuesto_amount) if self.presupuesto_amount else None,
            "created_by": self.created_by,
            "timestamp": self.timestamp.isoformat()
        }
