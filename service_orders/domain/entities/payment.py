from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

from ..enums import PaymentMethod
from ..value_objects.money import Money


@dataclass(frozen=True)
class Payment:
    id: str
    service_order_id: str
    amount: Money
    method: PaymentMethod
    created_at: datetime
    created_by: str
    reference: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def create(
        cls,
        service_order_id: str,
        amount: Money,
        method: PaymentMethod,
        actor_id: str,
        timestamp: datetime,
        reference: Optional[str] = None,
        notes: Optional[str] = None
    ) -> 'Payment':
        return cls(
            id=str(uuid4()),
            service_order_id=service_order_id,
            amount=amount,
            method=method,
            created_at=timestamp,
            created_by=actor_id,
            reference=reference,
            notes=notes
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "service_order_id": self.service_order_id,
            "amount": str(self.amount),
            "method": self.method.value,
            "reference": self.reference,
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
            "created_by": self.created_by
        }
