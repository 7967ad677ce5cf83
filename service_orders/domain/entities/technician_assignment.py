from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional
from uuid import uuid4


@dataclass
class TechnicianAssignment:
    id: str
    service_order_id: str
    technician_id: str
    created_at: datetime
    updated_at: datetime
    created_by: str
    updated_by: str
    is_active: bool = True
    notes: Optional[str] = None

    @classmethod
    def create(
        cls,
        service_order_id: str,
        technician_id: str,
        actor_id: str,
        timestamp: datetime,
        notes: Optional[str] = None
    ) -> 'TechnicianAssignment':
        return cls(
            id=str(uuid4()),
            service_order_id=service_order_id,
            technician_id=technician_id,
            created_at=timestamp,
            updated_at=timestamp,
            created_by=actor_id,
            updated_by=actor_id,
            notes=notes
        )

    def update_notes(self, notes: str, actor_id: str, timestamp: datetime) -> None:
        self.notes = notes
        self.updated_by = actor_id
        self.updated_at = timestamp

    def deactivate(self, actor_id: str, timestamp: datetime) -> None:
        self.is_active = False
        self.updated_by = actor_id
        self.updated_at = timestamp

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "service_order_id": self.service_order_id,
            "technician_id": self.technician_id,
            "is_active": self.is_active,
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat()
        }
