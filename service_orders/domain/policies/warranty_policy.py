from datetime import datetime
from typing import Optional

from ..entities.service_order import ServiceOrder
from ..enums import OrderStatus, WarrantyPriority
from ..exceptions.domain_exceptions import (
    EligibilityException,
    StateTransitionException,
    ValidationException
)
from .state_machine import OrderStateMachine, StatusChange, TransitionPlan

WARRANTY_ELIGIBLE_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.ENTREGA_GENERADA})


class WarrantyPolicy:
    def __init__(self, state_machine: OrderStateMachine):
        self._state_machine = state_machine

    def set_warranty_period(
        self,
        order: ServiceOrder,
        start_date: datetime,
        end_date: Optional[datetime],
        is_unlimited: bool,
        actor_id: str,
        timestamp: datetime,
        operation: str = "SET_WARRANTY_PERIOD"
    ) -> None:
        if not is_unlimited:
            if end_date is None:
                raise ValidationException.build(
                    operation,
                    order.id,
                    "Debe establecer una fecha de fin de garantía."
                )
            if end_date <= start_date:
                raise ValidationException.build(
                    operation,
                    order.id,
                    "La fecha de fin de garantía debe ser posterior a la de inicio."
                )

        order.garantia_start_date = start_date
        order.garantia_end_date = None if is_unlimited else end_date
        order.garantia_ilimitada = is_unlimited
        order.touch(actor_id, timestamp)

    @staticmethod
    def is_warranty_active(order: ServiceOrder, now: datetime) -> bool:
        if order.garantia_ilimitada:
            return True
        return order.garantia_end_date is not None and order.garantia_end_date > now

    def can_apply_warranty(self, order: ServiceOrder, now: datetime) -> bool:
        return order.status in WARRANTY_ELIGIBLE_STATUSES and self.is_warranty_active(order, now)

    def apply_warranty_damage(
        self,
        order: ServiceOrder,
        reason: str,
        priority: WarrantyPriority,
        actor_id: str,
        timestamp: datetime,
        operation: str = "APPLY_WARRANTY_DAMAGE"
    ) -> None:
        if not reason or not reason.strip():
            raise ValidationException.build(
                operation,
                order.id,
                "Debe ingresar una razón para la garantía."
            )
        if order.status not in WARRANTY_ELIGIBLE_STATUSES:
            raise EligibilityException.build(
                operation,
                order.id,
                f"La orden en estado {order.status.value} no admite garantía."
            )
        if not self.is_warranty_active(order, timestamp):
            raise EligibilityException.build(
                operation,
                order.id,
                "El período de garantía de la orden ha vencido."
            )

        reason = reason.strip()
        self._state_machine.apply(
            order,
            TransitionPlan(
                requested=OrderStatus.GARANTIA_APLICADA,
                changes={"razon_garantia": reason, "garantia_prioridad": priority},
                note_suffix=f". Razón: {reason}",
                policy_edge=True,
                context={"razon_garantia": reason, "garantia_prioridad": priority.value}
            ),
            actor_id,
            timestamp,
            operation
        )

    def resolve_warranty(
        self,
        order: ServiceOrder,
        resolution_reason: str,
        actor_id: str,
        timestamp: datetime,
        operation: str = "RESOLVE_WARRANTY"
    ) -> None:
        if order.status != OrderStatus.GARANTIA_APLICADA:
            raise StateTransitionException.build(
                operation,
                order.id,
                f"Solo se puede resolver una garantía aplicada (estado actual: {order.status.value})."
            )
        self._state_machine.change_status(
            order,
            StatusChange(
                target=OrderStatus.GARANTIA_RESUELTA,
                razon_resolucion_garantia=resolution_reason
            ),
            actor_id,
            timestamp,
            operation
        )
