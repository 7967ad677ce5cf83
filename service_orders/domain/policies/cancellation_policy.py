from datetime import datetime
from typing import Optional

from ..entities.service_order import ServiceOrder
from ..enums import CancellationType, OrderStatus
from ..exceptions.domain_exceptions import StateTransitionException, ValidationException
from .state_machine import OrderStateMachine, TransitionPlan, has_min_length


class CancellationPolicy:
    """Permanent cancellation, cancel-and-reschedule, and revert.

    Each flow becomes a single guarded transition so the history entry and
    notifications match any other status change.
    """

    def __init__(self, state_machine: OrderStateMachine):
        self._state_machine = state_machine

    def cancel_or_reschedule(
        self,
        order: ServiceOrder,
        notes: Optional[str],
        cancellation_type: CancellationType,
        actor_id: str,
        timestamp: datetime,
        new_date: Optional[datetime] = None,
        operation: str = "CANCEL_OR_RESCHEDULE"
    ) -> bool:
        if cancellation_type == CancellationType.REVERT:
            plan = self._plan_revert(order, operation)
        else:
            if not has_min_length(notes):
                raise ValidationException.build(
                    operation,
                    order.id,
                    "La razón de cancelación debe tener al menos 10 caracteres."
                )
            if cancellation_type == CancellationType.RESCHEDULE:
                plan = self._plan_reschedule(order, notes, new_date, timestamp, operation)
            else:
                plan = self._plan_permanent(notes, timestamp)

        return self._state_machine.apply(order, plan, actor_id, timestamp, operation)

    @staticmethod
    def _plan_permanent(notes: str, timestamp: datetime) -> TransitionPlan:
        return TransitionPlan(
            requested=OrderStatus.CANCELLED,
            changes={
                "cancellation_notes": notes,
                "cancellation_type": CancellationType.PERMANENT,
                "cancellation_date": timestamp,
            },
            note_suffix=f". Razón: {notes}",
            context={"cancellation_notes": notes}
        )

    @staticmethod
    def _plan_reschedule(
        order: ServiceOrder,
        notes: str,
        new_date: Optional[datetime],
        timestamp: datetime,
        operation: str
    ) -> TransitionPlan:
        if new_date is None:
            raise ValidationException.build(
                operation,
                order.id,
                "Debe seleccionar una nueva fecha de agenda."
            )
        if order.status == OrderStatus.CANCELLED:
            raise StateTransitionException.build(
                operation,
                order.id,
                "Una orden cancelada solo puede reactivarse (revert) antes de reprogramarse."
            )
        return TransitionPlan(
            requested=OrderStatus.CANCELLED,
            effective=OrderStatus.PENDING,
            changes={
                "cancellation_notes": notes,
                "cancellation_type": CancellationType.RESCHEDULE,
                "cancellation_date": timestamp,
                "fecha_agendado": new_date,
                "rescheduled_from_cancellation": True,
            },
            note_suffix=f". Reprogramado desde cancelación. Motivo: {notes}",
            context={
                "cancellation_notes": notes,
                "rescheduled": True,
                "fecha_agendado": new_date.isoformat(),
            }
        )

    @staticmethod
    def _plan_revert(order: ServiceOrder, operation: str) -> TransitionPlan:
        if order.status != OrderStatus.CANCELLED:
            raise StateTransitionException.build(
                operation,
                order.id,
                "Solo se puede revertir una orden cancelada."
            )
        return TransitionPlan(
            requested=OrderStatus.PENDING,
            changes={
                "cancellation_notes": None,
                "cancellation_type": None,
                "cancellation_date": None,
                "rescheduled_from_cancellation": False,
            },
            note_suffix=". Cancelación revertida",
            context={"reverted": True}
        )
