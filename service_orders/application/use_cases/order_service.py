import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Optional

from ...domain import (
    CancellationPolicy,
    ClientContact,
    DeliveryNote,
    DomainError,
    DomainException,
    ErrorCode,
    Money,
    NotificationEvent,
    NotificationPublisher,
    NotificationType,
    OrderNotFoundException,
    OrderStatus,
    OrderStateMachine,
    PaymentLedger,
    PersistenceException,
    ServiceOrder,
    ServiceOrderRepository,
    StatusHistoryLog,
    TechnicianAssignment,
    TechnicianAssignmentTracker,
    TransitionPlan,
    ValidationException,
    WarrantyPolicy,
    WarrantyPriority
)
from ..dtos import (
    ApplyWarrantyDamageRequest,
    AssignTechnicianRequest,
    CancelOrRescheduleRequest,
    ChangeStatusRequest,
    CreateDeliveryNoteRequest,
    CreateOrderRequest,
    DeactivateTechnicianRequest,
    RecordPaymentRequest,
    ResolveWarrantyRequest,
    Result,
    SetWarrantyPeriodRequest,
    UpdateOrderDetailsRequest
)
from .order_locks import OrderLocks

logger = logging.getLogger(__name__)

UNASSIGNED = "unassigned"

_PRIORITY_RANK = {
    WarrantyPriority.ALTA: 3,
    WarrantyPriority.MEDIA: 2,
    WarrantyPriority.BAJA: 1,
}
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ServiceOrderService:
    """Caller-facing operations of the order lifecycle.

    Each mutating operation loads the aggregate under its order lock, runs
    the policies against that working copy, saves it, and only then hands
    the queued notification events to the publisher. Every operation
    returns a `Result`; domain failures never escape as exceptions.
    """

    def __init__(
        self,
        repository: ServiceOrderRepository,
        publisher: Optional[NotificationPublisher] = None,
        clock: Callable[[], datetime] = utc_now,
        locks: Optional[OrderLocks] = None,
        default_order_prefix: str = "ORD"
    ):
        self._repository = repository
        self._publisher = publisher
        self._clock = clock
        self._locks = locks or OrderLocks()
        self._default_order_prefix = default_order_prefix

        self._history = StatusHistoryLog()
        self._state_machine = OrderStateMachine(self._history)
        self._ledger = PaymentLedger()
        self._warranty = WarrantyPolicy(self._state_machine)
        self._cancellation = CancellationPolicy(self._state_machine)
        self._technicians = TechnicianAssignmentTracker(self._state_machine)

    # -- commands ---------------------------------------------------------

    def create_order(self, request: CreateOrderRequest, actor_id: str) -> Result:
        operation = "CREATE_ORDER"
        try:
            if not request.client.name.strip() or not request.client.phone.strip():
                raise ValidationException.build(
                    operation, "NEW", "El cliente debe tener nombre y teléfono."
                )
            if request.total_amount is not None and request.total_amount < 0:
                raise ValidationException.build(
                    operation, "NEW", "El monto total no puede ser negativo."
                )

            now = self._clock()
            technician_id = request.technician_id
            has_technician = bool(technician_id) and technician_id != UNASSIGNED
            if request.is_pre_order:
                status = OrderStatus.PREORDER
            elif has_technician:
                status = OrderStatus.ASSIGNED
            else:
                status = OrderStatus.PENDING

            prefix = self._order_prefix(request.appliance_type)
            order_number = f"{prefix}-{self._repository.next_sequence(prefix):06d}"
            order = ServiceOrder.create(
                order_number=order_number,
                client=ClientContact(
                    name=request.client.name,
                    phone=request.client.phone,
                    whatsapp=request.client.whatsapp
                ),
                status=status,
                actor_id=actor_id,
                timestamp=now,
                total_amount=Money(request.total_amount) if request.total_amount is not None else None,
                description=request.description,
                reference=request.reference,
                appliance_type=request.appliance_type,
                appliance_ids=request.appliance_ids,
                fecha_agendado=request.fecha_agendado
            )
            self._ledger.refresh_status(order)
            if has_technician:
                order.assignments.append(TechnicianAssignment.create(
                    service_order_id=order.id,
                    technician_id=technician_id,
                    actor_id=actor_id,
                    timestamp=now
                ))

            kind = "Pre-orden" if request.is_pre_order else "Orden"
            self._history.append(order, status, f"{kind} creada con estado: {status.value}", actor_id, now)
            order.record_event(NotificationType.ORDER_CREATED, now, {
                "status": status.value,
                "is_pre_order": request.is_pre_order,
                "description": request.description,
                "total_amount": str(order.total_amount) if request.total_amount is not None else None,
                "fecha_agendado": request.fecha_agendado.isoformat() if request.fecha_agendado else None,
                "technicians": [a.technician_id for a in order.active_assignments()],
            })
            events = order.pull_events()
            self._save(order, operation)
        except DomainException as e:
            return self._failure(e)

        logger.info("Orden #%s creada con estado %s por %s", order.order_number, status.value, actor_id)
        self._publish(events)
        return Result.ok(order.to_dict())

    def update_order_details(
        self,
        order_id: str,
        request: UpdateOrderDetailsRequest,
        actor_id: str
    ) -> Result:
        def mutate(order: ServiceOrder, now: datetime) -> ServiceOrder:
            if request.total_amount is not None and request.total_amount < 0:
                raise ValidationException.build(
                    "UPDATE_ORDER", order.id, "El monto total no puede ser negativo."
                )
            for name in ("description", "reference", "diagnostics", "client_notifications_enabled"):
                value = getattr(request, name)
                if value is not None:
                    setattr(order, name, value)
            if request.include_iva is not None:
                order.include_iva = request.include_iva
            if request.concepto_orden is not None:
                order.concepto_orden = request.concepto_orden.to_concept()
            if order.concepto_orden is not None and request.include_iva is not None:
                order.concepto_orden = order.concepto_orden.with_iva(request.include_iva)
            if request.total_amount is not None:
                order.total_amount = Money(request.total_amount)
                self._ledger.refresh_status(order)
            order.touch(actor_id, now)
            return order

        return self._execute("UPDATE_ORDER", order_id, actor_id, mutate)

    def change_status(self, order_id: str, request: ChangeStatusRequest, actor_id: str) -> Result:
        def mutate(order: ServiceOrder, now: datetime) -> ServiceOrder:
            self._state_machine.change_status(order, request.to_status_change(), actor_id, now)
            return order

        return self._execute("CHANGE_STATUS", order_id, actor_id, mutate)

    def record_payment(self, order_id: str, request: RecordPaymentRequest, actor_id: str) -> Result:
        def mutate(order: ServiceOrder, now: datetime):
            return self._ledger.record_payment(
                order,
                Money(request.amount),
                request.method,
                actor_id,
                now,
                reference=request.reference,
                notes=request.notes
            )

        return self._execute("RECORD_PAYMENT", order_id, actor_id, mutate)

    def assign_technician(
        self,
        order_id: str,
        request: AssignTechnicianRequest,
        actor_id: str
    ) -> Result:
        def mutate(order: ServiceOrder, now: datetime):
            return self._technicians.assign(order, request.technician_id, actor_id, now, notes=request.notes)

        return self._execute("ASSIGN_TECHNICIAN", order_id, actor_id, mutate)

    def deactivate_technician_assignment(
        self,
        order_id: str,
        technician_id: str,
        request: DeactivateTechnicianRequest,
        actor_id: str
    ) -> Result:
        def mutate(order: ServiceOrder, now: datetime) -> None:
            self._technicians.deactivate(
                order,
                technician_id,
                actor_id,
                now,
                replacement_technician_id=request.replacement_technician_id
            )

        return self._execute("DEACTIVATE_TECHNICIAN", order_id, actor_id, mutate)

    def set_warranty_period(
        self,
        order_id: str,
        request: SetWarrantyPeriodRequest,
        actor_id: str
    ) -> Result:
        def mutate(order: ServiceOrder, now: datetime) -> ServiceOrder:
            self._warranty.set_warranty_period(
                order, request.start_date, request.end_date, request.is_unlimited, actor_id, now
            )
            return order

        return self._execute("SET_WARRANTY_PERIOD", order_id, actor_id, mutate)

    def apply_warranty_damage(
        self,
        order_id: str,
        request: ApplyWarrantyDamageRequest,
        actor_id: str
    ) -> Result:
        def mutate(order: ServiceOrder, now: datetime) -> ServiceOrder:
            self._warranty.apply_warranty_damage(order, request.reason, request.priority, actor_id, now)
            return order

        return self._execute("APPLY_WARRANTY_DAMAGE", order_id, actor_id, mutate)

    def resolve_warranty(self, order_id: str, request: ResolveWarrantyRequest, actor_id: str) -> Result:
        def mutate(order: ServiceOrder, now: datetime) -> ServiceOrder:
            self._warranty.resolve_warranty(order, request.reason, actor_id, now)
            return order

        return self._execute("RESOLVE_WARRANTY", order_id, actor_id, mutate)

    def cancel_or_reschedule(
        self,
        order_id: str,
        request: CancelOrRescheduleRequest,
        actor_id: str
    ) -> Result:
        def mutate(order: ServiceOrder, now: datetime) -> ServiceOrder:
            self._cancellation.cancel_or_reschedule(
                order,
                request.notes,
                request.cancellation_type,
                actor_id,
                now,
                new_date=request.new_date
            )
            return order

        return self._execute("CANCEL_OR_RESCHEDULE", order_id, actor_id, mutate)

    def create_delivery_note(
        self,
        order_id: str,
        request: CreateDeliveryNoteRequest,
        actor_id: str
    ) -> Result:
        operation = "CREATE_DELIVERY_NOTE"

        def mutate(order: ServiceOrder, now: datetime) -> DeliveryNote:
            if not request.received_by.strip():
                raise ValidationException.build(
                    operation, order.id, "Debe indicar quién recibe el equipo."
                )
            changes: dict[str, Any] = {}
            if request.concepto_orden is not None:
                changes["concepto_orden"] = request.concepto_orden.to_concept()
            previous = order.status
            self._state_machine.apply(
                order,
                TransitionPlan(
                    requested=OrderStatus.DELIVERED,
                    changes=changes,
                    note=(
                        f"Nota de entrega creada. Recibido por: {request.received_by}. "
                        f"Estado cambiado de {previous.value} a {OrderStatus.DELIVERED.value}."
                    ),
                    context={"received_by": request.received_by}
                ),
                actor_id,
                now,
                operation
            )
            note = DeliveryNote.create(
                service_order_id=order.id,
                received_by=request.received_by,
                include_iva=request.include_iva,
                actor_id=actor_id,
                timestamp=now,
                notes=request.notes,
                amount=Money(request.amount) if request.amount is not None else None
            )
            order.delivery_notes.append(note)
            return note

        return self._execute(operation, order_id, actor_id, mutate)

    def delete_order(self, order_id: str, actor_id: str) -> Result:
        """Administrative cascading delete; not a lifecycle transition."""
        operation = "DELETE_ORDER"
        with self._locks.hold(order_id):
            try:
                order = self._get_order(order_id, operation)
                self._guard_persistence(operation, order_id, self._repository.delete, order_id)
            except DomainException as e:
                return self._failure(e)

        logger.info(
            "Orden #%s eliminada en cascada por %s (%d pagos, %d asignaciones, %d registros de historial)",
            order.order_number,
            actor_id,
            len(order.payments),
            len(order.assignments),
            len(order.history)
        )
        return Result.ok({
            "order_number": order.order_number,
            "message": f"Orden #{order.order_number} eliminada correctamente"
        })

    # -- queries ----------------------------------------------------------

    def get_order(self, order_id: str) -> Result:
        try:
            order = self._get_order(order_id, "GET_ORDER")
        except DomainException as e:
            return self._failure(e)
        return Result.ok(order.to_dict())

    def list_orders(self, status: Optional[OrderStatus] = None) -> Result:
        orders = self._repository.find_all()
        if status is not None:
            orders = [o for o in orders if o.status == status]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return Result.ok([o.to_dict() for o in orders])

    def list_warranty_orders(self) -> Result:
        orders = [
            o for o in self._repository.find_all()
            if o.garantia_end_date is not None
            or o.garantia_ilimitada
            or o.status == OrderStatus.GARANTIA_APLICADA
        ]
        orders.sort(
            key=lambda o: (
                _PRIORITY_RANK.get(o.garantia_prioridad, 0),
                o.garantia_ilimitada,
                o.garantia_end_date or _EPOCH
            ),
            reverse=True
        )
        return Result.ok([o.to_dict() for o in orders])

    def get_status_history(self, order_id: str) -> Result:
        try:
            order = self._get_order(order_id, "GET_STATUS_HISTORY")
        except DomainException as e:
            return self._failure(e)
        return Result.ok([entry.to_dict() for entry in self._history.list(order)])

    def list_active_assignments(self, order_id: str) -> Result:
        try:
            order = self._get_order(order_id, "LIST_ASSIGNMENTS")
        except DomainException as e:
            return self._failure(e)
        return Result.ok([a.to_dict() for a in order.active_assignments()])

    # -- internals --------------------------------------------------------

    def _execute(
        self,
        operation: str,
        order_id: str,
        actor_id: str,
        mutate: Callable[[ServiceOrder, datetime], Any]
    ) -> Result:
        with self._locks.hold(order_id):
            try:
                order = self._get_order(order_id, operation)
                previous = order.status
                outcome = mutate(order, self._clock())
                events = order.pull_events()
                self._save(order, operation)
            except DomainException as e:
                return self._failure(e)

        if order.status != previous:
            logger.info(
                "%s: orden #%s %s -> %s por %s",
                operation, order.order_number, previous.value, order.status.value, actor_id
            )
        else:
            logger.info("%s: orden #%s actualizada por %s", operation, order.order_number, actor_id)
        self._publish(events)
        return Result.ok(outcome.to_dict() if outcome is not None else None)

    def _get_order(self, order_id: str, operation: str) -> ServiceOrder:
        order = self._guard_persistence(operation, order_id, self._repository.find_by_id, order_id)
        if order is None:
            raise OrderNotFoundException.build(
                operation, order_id, f"Orden no encontrada: {order_id}"
            )
        return order

    def _save(self, order: ServiceOrder, operation: str) -> None:
        self._guard_persistence(operation, order.id, self._repository.save, order)

    @staticmethod
    def _guard_persistence(operation: str, order_id: str, call: Callable, *args: Any) -> Any:
        try:
            return call(*args)
        except DomainException:
            raise
        except Exception as e:
            logger.error("%s: fallo de persistencia en la orden %s", operation, order_id, exc_info=True)
            raise PersistenceException(DomainError(
                operation=operation,
                order_id=order_id,
                code=ErrorCode.PERSISTENCE_ERROR,
                message="Error al guardar la orden de servicio"
            ), details=str(e)) from e

    def _order_prefix(self, appliance_type: Optional[str]) -> str:
        if appliance_type and appliance_type.strip():
            return appliance_type.strip()[:3].upper()
        return self._default_order_prefix

    def _publish(self, events: list[NotificationEvent]) -> None:
        if not events or self._publisher is None:
            return
        try:
            self._publisher.publish(events)
        except Exception:
            logger.exception("No se pudieron despachar %d notificaciones", len(events))

    @staticmethod
    def _failure(exception: DomainException) -> Result:
        error = exception.error
        if error.code == ErrorCode.PERSISTENCE_ERROR:
            logger.error("%s [%s] %s: %s", error.operation, error.order_id, error.code.value, error.message)
        else:
            logger.warning("%s [%s] %s: %s", error.operation, error.order_id, error.code.value, error.message)
        return Result.fail(error, exception.details)
