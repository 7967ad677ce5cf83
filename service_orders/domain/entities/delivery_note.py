from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

from ..value_objects.money import Money


@dataclass(frozen=True)
class DeliveryNote:
    id: str
    service_order_id: str
    note_number: str
    received_by: str
    include_iva: bool
    created_by: str
    created_at: datetime
    notes: Optional[str] = None
    amount: Optional[Money] = None

    @classmethod
    def create(
        cls,
        service_order_id: str,
        received_by: str,
        include_iva: bool,
        actor_id: str,
        timestamp: datetime,
        notes: Optional[str] = None,
        amount: Optional[Money] = None
    ) -> 'DeliveryNote':
        return cls(
            id=str(uuid4()),
            service_order_id=service_order_id,
            note_number=f"DN-{int(timestamp.timestamp() * 1000)}",
            received_by=received_by,
            include_iva=include_iva,
            created_by=actor_id,
            created_at=timestamp,
            notes=notes,
            amount=amount
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "service_order_id": self.service_order_id,
            "note_number": self.note_number,
            "received_by": self.received_by,
            "notes": self.notes,
            "amount": str(self.amount) if self.amount else None,
            "include_iva": self.include_iva,
            "created_at": self.created_at.isoformat()
        }
