from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...domain import (
    CancellationType,
    Money,
    OrderConcept,
    OrderStatus,
    PaymentMethod,
    StatusChange,
    WarrantyPriority
)


def _money(value: Optional[Decimal]) -> Optional[Money]:
    return Money(value) if value is not None else None


class CommandModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @field_validator("*", mode="after")
    @classmethod
    def _assume_utc(cls, value: Any) -> Any:
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class ClientData(CommandModel):
    name: str
    phone: str
    whatsapp: Optional[str] = None


class OrderConceptData(CommandModel):
    header: str = ""
    text: str = ""
    amount: Decimal = Decimal("0")
    include_iva: bool = False

    def to_concept(self) -> OrderConcept:
        return OrderConcept.create(self.header, self.text, self.amount, self.include_iva)


class CreateOrderRequest(CommandModel):
    client: ClientData
    appliance_type: Optional[str] = None
    appliance_ids: list[str] = Field(default_factory=list)
    technician_id: Optional[str] = None
    is_pre_order: bool = False
    total_amount: Optional[Decimal] = None
    description: Optional[str] = None
    reference: Optional[str] = None
    fecha_agendado: Optional[datetime] = None


class UpdateOrderDetailsRequest(CommandModel):
    description: Optional[str] = None
    reference: Optional[str] = None
    diagnostics: Optional[str] = None
    total_amount: Optional[Decimal] = None
    include_iva: Optional[bool] = None
    concepto_orden: Optional[OrderConceptData] = None
    client_notifications_enabled: Optional[bool] = None


class ChangeStatusRequest(CommandModel):
    """Target status plus only the fields that target accepts."""

    status: OrderStatus
    presupuesto_amount: Optional[Decimal] = None
    include_iva: Optional[bool] = None
    fecha_reparacion: Optional[datetime] = None
    fecha_seguimiento: Optional[datetime] = None
    fecha_agendado: Optional[datetime] = None
    razon_no_aprobado: Optional[str] = None
    razon_resolucion_garantia: Optional[str] = None
    cancellation_notes: Optional[str] = None
    diagnostics: Optional[str] = None

    def to_status_change(self) -> StatusChange:
        return StatusChange(
            target=self.status,
            presupuesto_amount=_money(self.presupuesto_amount),
            include_iva=self.include_iva,
            fecha_reparacion=self.fecha_reparacion,
            fecha_seguimiento=self.fecha_seguimiento,
            fecha_agendado=self.fecha_agendado,
            razon_no_aprobado=self.razon_no_aprobado,
            razon_resolucion_garantia=self.razon_resolucion_garantia,
            cancellation_notes=self.cancellation_notes,
            diagnostics=self.diagnostics
        )


class RecordPaymentRequest(CommandModel):
    amount: Decimal
    method: PaymentMethod
    reference: Optional[str] = None
    notes: Optional[str] = None


class AssignTechnicianRequest(CommandModel):
    technician_id: str
    notes: Optional[str] = None


class DeactivateTechnicianRequest(CommandModel):
    replacement_technician_id: Optional[str] = None


class SetWarrantyPeriodRequest(CommandModel):
    start_date: datetime
    end_date: Optional[datetime] = None
    is_unlimited: bool = False


class ApplyWarrantyDamageRequest(CommandModel):
    reason: str
    priority: WarrantyPriority = WarrantyPriority.BAJA


class ResolveWarrantyRequest(CommandModel):
    reason: str


class CancelOrRescheduleRequest(CommandModel):
    cancellation_type: CancellationType = Field(alias="type")
    notes: Optional[str] = None
    new_date: Optional[datetime] = None


class CreateDeliveryNoteRequest(CommandModel):
    received_by: str
    notes: Optional[str] = None
    amount: Optional[Decimal] = None
    include_iva: bool = False
    concepto_orden: Optional[OrderConceptData] = None


class RegisterTechnicianRequest(CommandModel):
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
