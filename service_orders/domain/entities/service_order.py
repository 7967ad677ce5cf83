from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

from ..enums import (
    Audience,
    CancellationType,
    NotificationType,
    OrderStatus,
    PaymentStatus,
    WarrantyPriority
)
from ..events.notification_event import NotificationEvent
from ..value_objects.money import Money
from ..value_objects.order_concept import OrderConcept
from .delivery_note import DeliveryNote
from .payment import Payment
from .status_history_entry import StatusHistoryEntry
from .technician_assignment import TechnicianAssignment


@dataclass(frozen=True)
class ClientContact:
    name: str
    phone: str
    whatsapp: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "phone": self.phone, "whatsapp": self.whatsapp}


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class ServiceOrder:
    """Aggregate root: the order with its payments, assignments and history.

    The aggregate is the unit of persistence. Policies mutate it in place and
    queue notification events that the application layer pulls after saving.
    """

    id: str
    order_number: str
    client: ClientContact
    created_by: str
    updated_by: str
    created_at: datetime
    updated_at: datetime
    fecha_captacion: datetime
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING

    total_amount: Money = field(default_factory=Money.zero)
    paid_amount: Money = field(default_factory=Money.zero)
    presupuesto_amount: Optional[Money] = None
    include_iva: bool = False
    concepto_orden: Optional[OrderConcept] = None

    description: Optional[str] = None
    reference: Optional[str] = None
    appliance_type: Optional[str] = None
    appliance_ids: list[str] = field(default_factory=list)

    diagnostics: Optional[str] = None
    razon_no_aprobado: Optional[str] = None
    razon_garantia: Optional[str] = None
    razon_resolucion_garantia: Optional[str] = None

    garantia_start_date: Optional[datetime] = None
    garantia_end_date: Optional[datetime] = None
    garantia_ilimitada: bool = False
    garantia_prioridad: Optional[WarrantyPriority] = None

    cancellation_notes: Optional[str] = None
    cancellation_type: Optional[CancellationType] = None
    cancellation_date: Optional[datetime] = None
    rescheduled_from_cancellation: bool = False

    fecha_agendado: Optional[datetime] = None
    fecha_seguimiento: Optional[datetime] = None
    fecha_reparacion: Optional[datetime] = None
    completed_date: Optional[datetime] = None
    delivered_date: Optional[datetime] = None

    client_notifications_enabled: bool = True

    payments: list[Payment] = field(default_factory=list)
    assignments: list[TechnicianAssignment] = field(default_factory=list)
    history: list[StatusHistoryEntry] = field(default_factory=list)
    delivery_notes: list[DeliveryNote] = field(default_factory=list)

    version: int = 0
    events: list[NotificationEvent] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        order_number: str,
        client: ClientContact,
        status: OrderStatus,
        actor_id: str,
        timestamp: datetime,
        total_amount: Optional[Money] = None,
        description: Optional[str] = None,
        reference: Optional[str] = None,
        appliance_type: Optional[str] = None,
        appliance_ids: Optional[list[str]] = None,
        fecha_agendado: Optional[datetime] = None
    ) -> 'ServiceOrder':
        return cls(
            id=str(uuid4()),
            order_number=order_number,
            client=client,
            status=status,
            created_by=actor_id,
            updated_by=actor_id,
            created_at=timestamp,
            updated_at=timestamp,
            fecha_captacion=timestamp,
            total_amount=total_amount or Money.zero(),
            description=description,
            reference=reference,
            appliance_type=appliance_type,
            appliance_ids=list(appliance_ids or []),
            fecha_agendado=fecha_agendado
        )

    def touch(self, actor_id: str, timestamp: datetime) -> None:
        self.updated_by = actor_id
        self.updated_at = timestamp

    def active_assignments(self) -> list[TechnicianAssignment]:
        return [a for a in self.assignments if a.is_active]

    def find_active_assignment(self, technician_id: str) -> Optional[TechnicianAssignment]:
        for assignment in self.assignments:
            if assignment.is_active and assignment.technician_id == technician_id:
                return assignment
        return None

    def can_notify_client(self) -> bool:
        return self.client_notifications_enabled and bool(self.client.whatsapp)

    def record_event(
        self,
        event_type: NotificationType,
        timestamp: datetime,
        metadata: Optional[dict[str, Any]] = None,
        include_technician: bool = False
    ) -> None:
        """Queue one event per audience that should hear about the change."""
        audiences = [Audience.INTERNAL]
        if self.can_notify_client():
            audiences.insert(0, Audience.CLIENT)
        if include_technician:
            audiences.append(Audience.TECHNICIAN)

        for audience in audiences:
            self.events.append(NotificationEvent(
                order_id=self.id,
                order_number=self.order_number,
                event_type=event_type,
                audience=audience,
                timestamp=timestamp,
                metadata=dict(metadata or {}, client=self.client.to_dict())
            ))

    def pull_events(self) -> list[NotificationEvent]:
        events, self.events = self.events, []
        return events

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "order_number": self.order_number,
            "client": self.client.to_dict(),
            "status": self.status.value,
            "payment_status": self.payment_status.value,
            "total_amount": str(self.total_amount),
            "paid_amount": str(self.paid_amount),
            "presupuesto_amount": str(self.presupuesto_amount) if self.presupuesto_amount else None,
            "include_iva": self.include_iva,
            "concepto_orden": self.concepto_orden.to_dict() if self.concepto_orden else None,
            "description": self.description,
            "reference": self.reference,
            "appliance_type": self.appliance_type,
            "diagnostics": self.diagnostics,
            "razon_no_aprobado": self.razon_no_aprobado,
            "razon_garantia": self.razon_garantia,
            "razon_resolucion_garantia": self.razon_resolucion_garantia,
            "garantia_start_date": _iso(self.garantia_start_date),
            "garantia_end_date": _iso(self.garantia_end_date),
            "garantia_ilimitada": self.garantia_ilimitada,
            "garantia_prioridad": self.garantia_prioridad.value if self.garantia_prioridad else None,
            "cancellation_notes": self.cancellation_notes,
            "cancellation_type": self.cancellation_type.value if self.cancellation_type else None,
            "cancellation_date": _iso(self.cancellation_date),
            "rescheduled_from_cancellation": self.rescheduled_from_cancellation,
            "fecha_captacion": _iso(self.fecha_captacion),
            "fecha_agendado": _iso(self.fecha_agendado),
            "fecha_seguimiento": _iso(self.fecha_seguimiento),
            "fecha_reparacion": _iso(self.fecha_reparacion),
            "completed_date": _iso(self.completed_date),
            "delivered_date": _iso(self.delivered_date),
            "client_notifications_enabled": self.client_notifications_enabled,
            "active_technicians": [a.technician_id for a in self.active_assignments()],
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "version": self.version
        }
