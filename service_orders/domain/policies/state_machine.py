from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, Optional

from ..entities.service_order import ServiceOrder
from ..enums import CancellationType, NotificationType, OrderStatus
from ..exceptions.domain_exceptions import StateTransitionException, ValidationException
from ..value_objects.money import Money
from .status_history import StatusHistoryLog

S = OrderStatus

TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    S.PREORDER: frozenset({S.PENDING, S.CANCELLED}),
    S.PENDING: frozenset({S.PENDING, S.ASSIGNED, S.PREORDER, S.CANCELLED}),
    S.ASSIGNED: frozenset({S.ASSIGNED, S.FACTURADO, S.CANCELLED}),
    S.IN_PROGRESS: frozenset({
        S.IN_PROGRESS, S.APROBADO, S.NO_APROBADO, S.PENDIENTE_AVISAR, S.CANCELLED
    }),
    S.APROBADO: frozenset({S.APROBADO, S.REPARANDO, S.CANCELLED}),
    S.NO_APROBADO: frozenset({S.NO_APROBADO, S.APROBADO, S.CANCELLED}),
    S.PENDIENTE_AVISAR: frozenset({
        S.PENDIENTE_AVISAR, S.APROBADO, S.NO_APROBADO, S.CANCELLED
    }),
    S.FACTURADO: frozenset({
        S.FACTURADO, S.APROBADO, S.NO_APROBADO, S.PENDIENTE_AVISAR, S.CANCELLED
    }),
    S.REPARANDO: frozenset({S.REPARANDO, S.COMPLETED, S.CANCELLED}),
    S.COMPLETED: frozenset({S.COMPLETED, S.DELIVERED, S.CANCELLED}),
    S.ENTREGA_GENERADA: frozenset({S.ENTREGA_GENERADA, S.DELIVERED, S.CANCELLED}),
    S.DELIVERED: frozenset({S.CANCELLED}),
    S.GARANTIA_APLICADA: frozenset({S.GARANTIA_APLICADA, S.GARANTIA_RESUELTA, S.CANCELLED}),
    S.GARANTIA_RESUELTA: frozenset({S.DELIVERED, S.CANCELLED}),
    S.CANCELLED: frozenset({S.CANCELLED, S.PENDING, S.PREORDER}),
}

# Edges outside TRANSITIONS that only a policy operation may take, after
# running its own eligibility guard: target -> allowed sources.
POLICY_EDGES: dict[OrderStatus, frozenset[OrderStatus]] = {
    S.GARANTIA_APLICADA: frozenset({S.DELIVERED, S.ENTREGA_GENERADA}),
}

# Requested status -> status actually stored on the order.
EFFECTIVE_STATUS: dict[OrderStatus, OrderStatus] = {
    S.GARANTIA_RESUELTA: S.DELIVERED,
}

NO_APROBADO_VISIT_FEE = Money.from_string("5")
MIN_REASON_LENGTH = 10

# Optional request fields and the targets that accept them.
RELEVANT_FIELDS: dict[str, frozenset[OrderStatus]] = {
    "presupuesto_amount": frozenset({S.FACTURADO, S.APROBADO, S.PENDIENTE_AVISAR}),
    "include_iva": frozenset({S.FACTURADO, S.APROBADO, S.PENDIENTE_AVISAR}),
    "fecha_reparacion": frozenset({S.APROBADO, S.REPARANDO}),
    "fecha_seguimiento": frozenset({S.PENDIENTE_AVISAR}),
    "fecha_agendado": frozenset({S.PENDING}),
    "razon_no_aprobado": frozenset({S.NO_APROBADO}),
    "razon_resolucion_garantia": frozenset({S.GARANTIA_RESUELTA}),
    "cancellation_notes": frozenset({S.CANCELLED}),
    "diagnostics": frozenset(OrderStatus),
}


def has_min_length(text: Optional[str], length: int = MIN_REASON_LENGTH) -> bool:
    return text is not None and len(text.strip()) >= length


@dataclass(frozen=True)
class StatusChange:
    target: OrderStatus
    presupuesto_amount: Optional[Money] = None
    include_iva: Optional[bool] = None
    fecha_reparacion: Optional[datetime] = None
    fecha_seguimiento: Optional[datetime] = None
    fecha_agendado: Optional[datetime] = None
    razon_no_aprobado: Optional[str] = None
    razon_resolucion_garantia: Optional[str] = None
    cancellation_notes: Optional[str] = None
    diagnostics: Optional[str] = None

    def supplied_fields(self) -> list[str]:
        return [
            f.name for f in fields(self)
            if f.name != "target" and getattr(self, f.name) is not None
        ]


@dataclass
class TransitionPlan:
    """Everything a guarded transition writes, decided before anything is written."""

    requested: OrderStatus
    effective: Optional[OrderStatus] = None
    changes: dict[str, Any] = field(default_factory=dict)
    note: Optional[str] = None
    note_suffix: str = ""
    presupuesto_amount: Optional[Money] = None
    include_iva: bool = False
    policy_edge: bool = False
    context: dict[str, Any] = field(default_factory=dict)

    @property
    def target(self) -> OrderStatus:
        if self.effective is not None:
            return self.effective
        return EFFECTIVE_STATUS.get(self.requested, self.requested)


class OrderStateMachine:
    def __init__(self, history: Optional[StatusHistoryLog] = None):
        self._history = history or StatusHistoryLog()

    @property
    def history(self) -> StatusHistoryLog:
        return self._history

    @staticmethod
    def allowed_targets(status: OrderStatus) -> frozenset[OrderStatus]:
        return TRANSITIONS.get(status, frozenset())

    def can_transition(
        self,
        current: OrderStatus,
        requested: OrderStatus,
        policy_edge: bool = False
    ) -> bool:
        if requested in self.allowed_targets(current):
            return True
        return policy_edge and current in POLICY_EDGES.get(requested, frozenset())

    def validate_transition(
        self,
        order: ServiceOrder,
        requested: OrderStatus,
        operation: str,
        policy_edge: bool = False
    ) -> None:
        if not self.can_transition(order.status, requested, policy_edge):
            raise StateTransitionException.build(
                operation,
                order.id,
                f"Transición inválida de {order.status.value} a {requested.value}."
            )

    def change_status(
        self,
        order: ServiceOrder,
        change: StatusChange,
        actor_id: str,
        timestamp: datetime,
        operation: str = "CHANGE_STATUS"
    ) -> bool:
        self.validate_transition(order, change.target, operation)
        self._reject_irrelevant_fields(order, change, operation)
        plan = self._plan_for(order, change, timestamp, operation)
        return self.apply(order, plan, actor_id, timestamp, operation)

    def apply(
        self,
        order: ServiceOrder,
        plan: TransitionPlan,
        actor_id: str,
        timestamp: datetime,
        operation: str = "CHANGE_STATUS"
    ) -> bool:
        """Run the guards for `plan` and write it. Returns True if the status changed."""
        self.validate_transition(order, plan.requested, operation, plan.policy_edge)

        previous = order.status
        target = plan.target
        entering_cancelled = plan.requested == S.CANCELLED and previous != S.CANCELLED
        if entering_cancelled and not has_min_length(plan.changes.get("cancellation_notes")):
            raise ValidationException.build(
                operation,
                order.id,
                "La razón de cancelación debe tener al menos 10 caracteres."
            )

        for name, value in plan.changes.items():
            setattr(order, name, value)
        if target == S.COMPLETED and order.completed_date is None:
            order.completed_date = timestamp
        if target == S.DELIVERED and order.delivered_date is None:
            order.delivered_date = timestamp
        order.status = target
        order.touch(actor_id, timestamp)

        if target == previous:
            return False

        presupuesto = plan.presupuesto_amount or order.presupuesto_amount
        self._history.append(
            order,
            target,
            self._history_note(previous, target, plan, presupuesto),
            actor_id,
            timestamp,
            presupuesto
        )
        order.record_event(NotificationType.STATUS_CHANGED, timestamp, {
            **plan.context,
            "old_status": previous.value,
            "new_status": target.value,
            "requested_status": plan.requested.value,
            "presupuesto_amount": str(plan.presupuesto_amount) if plan.presupuesto_amount else None,
            "technicians": [a.technician_id for a in order.active_assignments()],
        })
        return True

    @staticmethod
    def _history_note(
        previous: OrderStatus,
        target: OrderStatus,
        plan: TransitionPlan,
        presupuesto: Optional[Money]
    ) -> str:
        if plan.note is not None:
            return plan.note
        note = f"Changed from {previous.value} to {target.value}{plan.note_suffix}"
        if presupuesto:
            note += f" with presupuesto amount {presupuesto}"
            if plan.include_iva:
                note += " (IVA included)"
        return note

    def _reject_irrelevant_fields(
        self,
        order: ServiceOrder,
        change: StatusChange,
        operation: str
    ) -> None:
        irrelevant = [
            name for name in change.supplied_fields()
            if change.target not in RELEVANT_FIELDS[name]
        ]
        if irrelevant:
            raise ValidationException.build(
                operation,
                order.id,
                f"Campos no permitidos para el estado {change.target.value}: {', '.join(irrelevant)}."
            )

    def _plan_for(
        self,
        order: ServiceOrder,
        change: StatusChange,
        timestamp: datetime,
        operation: str
    ) -> TransitionPlan:
        target = change.target
        plan = TransitionPlan(requested=target, include_iva=bool(change.include_iva))
        if change.diagnostics is not None:
            plan.changes["diagnostics"] = change.diagnostics
        if change.include_iva is not None:
            plan.changes["include_iva"] = change.include_iva

        if target == S.CANCELLED:
            if order.status != S.CANCELLED:
                plan.changes.update(
                    cancellation_notes=change.cancellation_notes,
                    cancellation_type=CancellationType.PERMANENT,
                    cancellation_date=timestamp
                )
                plan.note_suffix = f". Razón: {change.cancellation_notes}"
                plan.context["cancellation_notes"] = change.cancellation_notes
            elif change.cancellation_notes is not None:
                if not has_min_length(change.cancellation_notes):
                    raise ValidationException.build(
                        operation,
                        order.id,
                        "La razón de cancelación debe tener al menos 10 caracteres."
                    )
                plan.changes["cancellation_notes"] = change.cancellation_notes

        elif target == S.FACTURADO:
            if change.presupuesto_amount is None and order.status == S.ASSIGNED:
                raise ValidationException.build(
                    operation,
                    order.id,
                    "Debe ingresar un monto de presupuesto para facturar."
                )
            self._set_presupuesto(plan, change.presupuesto_amount, operation, order)

        elif target == S.APROBADO:
            self._set_presupuesto(plan, change.presupuesto_amount, operation, order)
            if change.fecha_reparacion is not None:
                plan.effective = S.REPARANDO
                plan.changes["fecha_reparacion"] = change.fecha_reparacion
                plan.context["fecha_reparacion"] = change.fecha_reparacion.isoformat()

        elif target == S.REPARANDO:
            if change.fecha_reparacion is not None:
                plan.changes["fecha_reparacion"] = change.fecha_reparacion
                plan.context["fecha_reparacion"] = change.fecha_reparacion.isoformat()

        elif target == S.NO_APROBADO:
            self._set_presupuesto(plan, NO_APROBADO_VISIT_FEE, operation, order)
            if change.razon_no_aprobado is not None:
                plan.changes["razon_no_aprobado"] = change.razon_no_aprobado
                plan.context["razon_no_aprobado"] = change.razon_no_aprobado

        elif target == S.PENDIENTE_AVISAR:
            self._set_presupuesto(plan, change.presupuesto_amount, operation, order)
            if change.fecha_seguimiento is not None:
                plan.changes["fecha_seguimiento"] = change.fecha_seguimiento

        elif target == S.GARANTIA_RESUELTA:
            if not has_min_length(change.razon_resolucion_garantia):
                raise ValidationException.build(
                    operation,
                    order.id,
                    "La resolución de la garantía debe tener al menos 10 caracteres."
                )
            plan.changes["razon_resolucion_garantia"] = change.razon_resolucion_garantia
            plan.note_suffix = f". Garantía resuelta: {change.razon_resolucion_garantia}"
            plan.context["razon_resolucion_garantia"] = change.razon_resolucion_garantia

        elif target == S.PENDING:
            if order.status == S.PREORDER:
                plan.changes["fecha_agendado"] = change.fecha_agendado or timestamp
            elif change.fecha_agendado is not None:
                plan.changes["fecha_agendado"] = change.fecha_agendado

        return plan

    @staticmethod
    def _set_presupuesto(
        plan: TransitionPlan,
        amount: Optional[Money],
        operation: str,
        order: ServiceOrder
    ) -> None:
        if amount is None:
            return
        if not amount.is_positive():
            raise ValidationException.build(
                operation,
                order.id,
                "El monto de presupuesto debe ser mayor a cero."
            )
        plan.presupuesto_amount = amount
        plan.changes["presupuesto_amount"] = amount
