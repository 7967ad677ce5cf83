from datetime import datetime
from typing import Optional

from ..entities.service_order import ServiceOrder
from ..entities.technician_assignment import TechnicianAssignment
from ..enums import NotificationType, OrderStatus
from ..exceptions.domain_exceptions import ValidationException
from .state_machine import OrderStateMachine, TransitionPlan

INITIAL_ASSIGNMENT_NOTE = "Asignación técnica inicial"
REPLACEMENT_NOTE = "Asignado como reemplazo"


class TechnicianAssignmentTracker:
    """Active technician assignments of an order.

    Several technicians may be active at once; at most one active row exists
    per technician.
    """

    def __init__(self, state_machine: OrderStateMachine):
        self._state_machine = state_machine

    def assign(
        self,
        order: ServiceOrder,
        technician_id: str,
        actor_id: str,
        timestamp: datetime,
        notes: Optional[str] = None,
        operation: str = "ASSIGN_TECHNICIAN"
    ) -> TechnicianAssignment:
        if not technician_id or not technician_id.strip():
            raise ValidationException.build(operation, order.id, "Debe indicar un técnico.")

        existing = order.find_active_assignment(technician_id)
        if existing is not None:
            if notes:
                existing.update_notes(notes, actor_id, timestamp)
            return existing

        assignment = TechnicianAssignment.create(
            service_order_id=order.id,
            technician_id=technician_id,
            actor_id=actor_id,
            timestamp=timestamp,
            notes=notes
        )
        order.assignments.append(assignment)
        order.touch(actor_id, timestamp)

        if order.status == OrderStatus.PENDING:
            self._state_machine.apply(
                order,
                TransitionPlan(requested=OrderStatus.ASSIGNED, note=INITIAL_ASSIGNMENT_NOTE),
                actor_id,
                timestamp,
                operation
            )

        order.record_event(NotificationType.TECHNICIAN_ASSIGNED, timestamp, {
            "technician_id": technician_id,
            "notes": notes,
            "technicians": [a.technician_id for a in order.active_assignments()],
        }, include_technician=True)
        return assignment

    def deactivate(
        self,
        order: ServiceOrder,
        technician_id: str,
        actor_id: str,
        timestamp: datetime,
        replacement_technician_id: Optional[str] = None,
        operation: str = "DEACTIVATE_TECHNICIAN"
    ) -> Optional[TechnicianAssignment]:
        existing = order.find_active_assignment(technician_id)
        if existing is None:
            raise ValidationException.build(
                operation,
                order.id,
                f"El técnico {technician_id} no tiene una asignación activa en la orden."
            )
        if replacement_technician_id == technician_id:
            raise ValidationException.build(
                operation,
                order.id,
                "El técnico de reemplazo debe ser distinto al retirado."
            )

        existing.deactivate(actor_id, timestamp)
        order.touch(actor_id, timestamp)

        replacement = None
        if replacement_technician_id:
            replacement = self.assign(
                order,
                replacement_technician_id,
                actor_id,
                timestamp,
                notes=REPLACEMENT_NOTE,
                operation=operation
            )

        order.record_event(NotificationType.TECHNICIAN_REMOVED, timestamp, {
            "technician_id": technician_id,
            "replacement_technician_id": replacement_technician_id,
            "technicians": [a.technician_id for a in order.active_assignments()],
        }, include_technician=True)
        return replacement
