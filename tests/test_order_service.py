import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from service_orders.application import ServiceOrderService
from service_orders.application.dtos import (
    ApplyWarrantyDamageRequest,
    AssignTechnicianRequest,
    CancelOrRescheduleRequest,
    ChangeStatusRequest,
    ClientData,
    CreateDeliveryNoteRequest,
    CreateOrderRequest,
    DeactivateTechnicianRequest,
    OrderConceptData,
    RecordPaymentRequest,
    ResolveWarrantyRequest,
    SetWarrantyPeriodRequest,
    UpdateOrderDetailsRequest
)
from service_orders.domain import (
    Audience,
    NotificationPublisher,
    NotificationType,
    OrderStatus,
    PaymentMethod
)
from service_orders.domain.exceptions import PersistenceException
from service_orders.infrastructure.adapters import InMemoryServiceOrderRepository

TS = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class RecordingPublisher(NotificationPublisher):
    def __init__(self):
        self.events = []

    def publish(self, events):
        self.events.extend(events)


class FailingPublisher(NotificationPublisher):
    def publish(self, events):
        raise RuntimeError("gateway caído")


class FlakyRepository(InMemoryServiceOrderRepository):
    def __init__(self):
        super().__init__()
        self.fail_saves = False

    def save(self, order):
        if self.fail_saves:
            raise RuntimeError("disk full")
        super().save(order)


def _create_request(**overrides) -> CreateOrderRequest:
    data = {
        "client": ClientData(name="Ana Pérez", phone="04141112233", whatsapp="+584141112233"),
        "appliance_type": "Lavadora",
        "total_amount": Decimal("100"),
        "description": "No centrifuga",
    }
    data.update(overrides)
    return CreateOrderRequest(**data)


class TestCreateOrder:
    def setup_method(self):
        self.repository = InMemoryServiceOrderRepository()
        self.publisher = RecordingPublisher()
        self.service = ServiceOrderService(self.repository, self.publisher, clock=FixedClock(TS))

    def test_order_number_uses_appliance_prefix(self):
        first = self.service.create_order(_create_request(), "u1")
        second = self.service.create_order(_create_request(), "u1")
        other = self.service.create_order(_create_request(appliance_type=None), "u1")

        assert first.data["order_number"] == "LAV-000001"
        assert second.data["order_number"] == "LAV-000002"
        assert other.data["order_number"] == "ORD-000001"

    def test_initial_status_follows_request(self):
        pending = self.service.create_order(_create_request(), "u1")
        assigned = self.service.create_order(_create_request(technician_id="tech-1"), "u1")
        unassigned = self.service.create_order(_create_request(technician_id="unassigned"), "u1")
        pre_order = self.service.create_order(_create_request(is_pre_order=True), "u1")

        assert pending.data["status"] == "PENDING"
        assert assigned.data["status"] == "ASSIGNED"
        assert assigned.data["active_technicians"] == ["tech-1"]
        assert unassigned.data["status"] == "PENDING"
        assert pre_order.data["status"] == "PREORDER"

    def test_creation_writes_history_and_events(self):
        result = self.service.create_order(_create_request(), "u1")
        history = self.service.get_status_history(result.data["id"])

        assert history.data[0]["notes"] == "Orden creada con estado: PENDING"
        assert [e.audience for e in self.publisher.events] == [Audience.CLIENT, Audience.INTERNAL]
        assert self.publisher.events[0].event_type == NotificationType.ORDER_CREATED

    def test_payment_status_follows_total_on_creation(self):
        billed = self.service.create_order(_create_request(), "u1")
        free = self.service.create_order(_create_request(total_amount=None), "u1")

        assert billed.data["payment_status"] == "PENDING"
        assert free.data["payment_status"] == "PAID"

    def test_client_without_name_is_rejected(self):
        result = self.service.create_order(
            _create_request(client=ClientData(name=" ", phone="0414")), "u1"
        )

        assert not result.success
        assert result.code == "VALIDATION_ERROR"
        assert self.repository.find_all() == []


class TestServiceOrderService:
    def setup_method(self):
        self.repository = FlakyRepository()
        self.publisher = RecordingPublisher()
        self.clock = FixedClock(TS)
        self.service = ServiceOrderService(self.repository, self.publisher, clock=self.clock)
        self.order_id = self.service.create_order(_create_request(), "u-admin").data["id"]
        self.publisher.events.clear()

    def _status(self) -> str:
        return self.service.get_order(self.order_id).data["status"]

    def _walk_to_completed(self) -> None:
        self.service.assign_technician(self.order_id, AssignTechnicianRequest(technician_id="tech-1"), "u1")
        self.service.change_status(self.order_id, ChangeStatusRequest(
            status=OrderStatus.FACTURADO, presupuesto_amount=Decimal("100")
        ), "u1")
        self.service.change_status(self.order_id, ChangeStatusRequest(
            status=OrderStatus.APROBADO, fecha_reparacion=TS + timedelta(days=1)
        ), "u1")
        self.service.change_status(self.order_id, ChangeStatusRequest(status=OrderStatus.COMPLETED), "u1")

    def test_unknown_order_is_not_found(self):
        result = self.service.change_status("missing", ChangeStatusRequest(status=OrderStatus.ASSIGNED), "u1")

        assert not result.success
        assert result.code == "NOT_FOUND"
        assert result.error == "Orden no encontrada: missing"

    def test_invalid_transition_does_not_touch_stored_order(self):
        before = self.repository.find_by_id(self.order_id)

        result = self.service.change_status(
            self.order_id, ChangeStatusRequest(status=OrderStatus.DELIVERED), "u1"
        )

        assert not result.success
        assert result.code == "STATE_TRANSITION_ERROR"
        assert self.repository.find_by_id(self.order_id) == before
        assert self.publisher.events == []

    def test_failed_operation_on_working_copy_leaves_store_clean(self):
        before = self.repository.find_by_id(self.order_id)

        result = self.service.change_status(self.order_id, ChangeStatusRequest(
            status=OrderStatus.CANCELLED, cancellation_notes="corto"
        ), "u1")

        assert result.code == "VALIDATION_ERROR"
        assert self.repository.find_by_id(self.order_id) == before

    def test_successful_change_returns_order(self):
        self.service.assign_technician(self.order_id, AssignTechnicianRequest(technician_id="tech-1"), "u1")
        result = self.service.change_status(self.order_id, ChangeStatusRequest(
            status=OrderStatus.FACTURADO, presupuesto_amount=Decimal("80")
        ), "u1")

        assert result.success
        assert result.data["status"] == "FACTURADO"
        assert result.data["presupuesto_amount"] == "80.00"
        assert result.data["updated_by"] == "u1"

    def test_payments_through_the_service(self):
        first = self.service.record_payment(
            self.order_id, RecordPaymentRequest(amount=Decimal("40"), method=PaymentMethod.CASH), "u1"
        )
        self.service.record_payment(
            self.order_id, RecordPaymentRequest(amount=Decimal("60"), method=PaymentMethod.CARD), "u1"
        )
        order = self.service.get_order(self.order_id).data

        assert first.data["amount"] == "40.00"
        assert order["paid_amount"] == "100.00"
        assert order["payment_status"] == "PAID"
        assert order["status"] == "PENDING"

    def test_zero_payment_is_a_validation_error(self):
        result = self.service.record_payment(
            self.order_id, RecordPaymentRequest(amount=Decimal("0"), method=PaymentMethod.CASH), "u1"
        )

        assert result.code == "VALIDATION_ERROR"
        assert result.error == "El monto del pago debe ser mayor a cero."

    def test_publisher_failure_does_not_fail_the_operation(self, caplog):
        service = ServiceOrderService(self.repository, FailingPublisher(), clock=self.clock)

        result = service.assign_technician(self.order_id, AssignTechnicianRequest(technician_id="tech-1"), "u1")

        assert result.success
        assert self._status() == "ASSIGNED"
        assert "No se pudieron despachar" in caplog.text

    def test_persistence_failure_publishes_nothing(self):
        self.repository.fail_saves = True

        result = self.service.assign_technician(
            self.order_id, AssignTechnicianRequest(technician_id="tech-1"), "u1"
        )

        assert not result.success
        assert result.code == "PERSISTENCE_ERROR"
        assert result.details == "disk full"
        assert self.publisher.events == []
        self.repository.fail_saves = False
        assert self._status() == "PENDING"

    def test_stale_aggregate_is_rejected_by_repository(self):
        stale = self.repository.find_by_id(self.order_id)
        fresh = self.repository.find_by_id(self.order_id)
        self.repository.save(fresh)

        with pytest.raises(PersistenceException):
            self.repository.save(stale)

    def test_concurrent_payments_are_not_lost(self):
        def pay(_):
            return self.service.record_payment(
                self.order_id,
                RecordPaymentRequest(amount=Decimal("1"), method=PaymentMethod.CASH),
                "u1"
            )

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(pay, range(40)))

        order = self.repository.find_by_id(self.order_id)
        assert all(r.success for r in results)
        assert str(order.paid_amount) == "40.00"
        assert len(order.payments) == 40

    def test_concurrent_assignment_and_status_change(self):
        barrier = threading.Barrier(2)

        def assign():
            barrier.wait()
            return self.service.assign_technician(
                self.order_id, AssignTechnicianRequest(technician_id="tech-1"), "u1"
            )

        def add_diagnostics():
            barrier.wait()
            return self.service.update_order_details(
                self.order_id, UpdateOrderDetailsRequest(diagnostics="Revisar rodamientos"), "u2"
            )

        threads = [threading.Thread(target=assign), threading.Thread(target=add_diagnostics)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        order = self.repository.find_by_id(self.order_id)
        assert order.status == OrderStatus.ASSIGNED
        assert order.diagnostics == "Revisar rodamientos"

    def test_update_details_recomputes_payment_status(self):
        self.service.record_payment(
            self.order_id, RecordPaymentRequest(amount=Decimal("100"), method=PaymentMethod.ZELLE), "u1"
        )

        result = self.service.update_order_details(self.order_id, UpdateOrderDetailsRequest(
            total_amount=Decimal("150"),
            concepto_orden=OrderConceptData(header="Reparación", text="Cambio de bomba", amount=Decimal("100")),
            include_iva=True
        ), "u1")

        assert result.data["payment_status"] == "PARTIAL"
        assert result.data["concepto_orden"]["total"] == "116.00"

    def test_zero_total_update_marks_order_paid(self):
        result = self.service.update_order_details(
            self.order_id, UpdateOrderDetailsRequest(total_amount=Decimal("0")), "u1"
        )

        assert result.data["payment_status"] == "PAID"

    def test_technician_replacement(self):
        self.service.assign_technician(self.order_id, AssignTechnicianRequest(technician_id="tech-1"), "u1")

        result = self.service.deactivate_technician_assignment(
            self.order_id, "tech-1", DeactivateTechnicianRequest(replacement_technician_id="tech-2"), "u1"
        )
        active = self.service.list_active_assignments(self.order_id)

        assert result.success
        assert result.data is None
        assert [a["technician_id"] for a in active.data] == ["tech-2"]

    def test_full_warranty_cycle(self):
        self._walk_to_completed()
        note = self.service.create_delivery_note(
            self.order_id, CreateDeliveryNoteRequest(received_by="Ana Pérez"), "u1"
        )
        self.service.set_warranty_period(self.order_id, SetWarrantyPeriodRequest(
            start_date=TS, end_date=TS + timedelta(days=90)
        ), "u1")
        self.clock.now = TS + timedelta(days=30)

        applied = self.service.apply_warranty_damage(self.order_id, ApplyWarrantyDamageRequest(
            reason="Volvió a perder agua", priority="ALTA"
        ), "u1")
        resolved = self.service.resolve_warranty(
            self.order_id, ResolveWarrantyRequest(reason="Se cambió el sello de la puerta"), "u1"
        )

        assert note.data["note_number"] == f"DN-{int(TS.timestamp() * 1000)}"
        assert applied.data["status"] == "GARANTIA_APLICADA"
        assert resolved.data["status"] == "DELIVERED"
        assert resolved.data["razon_resolucion_garantia"] == "Se cambió el sello de la puerta"

    def test_expired_warranty_is_an_eligibility_error(self):
        self._walk_to_completed()
        self.service.create_delivery_note(
            self.order_id, CreateDeliveryNoteRequest(received_by="Ana Pérez"), "u1"
        )
        self.service.set_warranty_period(self.order_id, SetWarrantyPeriodRequest(
            start_date=TS, end_date=TS + timedelta(days=10)
        ), "u1")
        self.clock.now = TS + timedelta(days=11)

        result = self.service.apply_warranty_damage(
            self.order_id, ApplyWarrantyDamageRequest(reason="Volvió a perder agua"), "u1"
        )

        assert result.code == "ELIGIBILITY_ERROR"
        assert self._status() == "DELIVERED"

    def test_delivery_note_requires_reachable_delivery(self):
        result = self.service.create_delivery_note(
            self.order_id, CreateDeliveryNoteRequest(received_by="Ana Pérez"), "u1"
        )

        assert result.code == "STATE_TRANSITION_ERROR"

    def test_cancel_reschedule_and_revert(self):
        cancelled = self.service.cancel_or_reschedule(self.order_id, CancelOrRescheduleRequest(
            type="permanent", notes="motor roto definitivamente"
        ), "u1")
        rescheduled = self.service.cancel_or_reschedule(self.order_id, CancelOrRescheduleRequest(
            type="reschedule", notes="motor roto definitivamente", new_date=TS + timedelta(days=3)
        ), "u1")
        reverted = self.service.cancel_or_reschedule(
            self.order_id, CancelOrRescheduleRequest(type="revert"), "u1"
        )

        assert cancelled.data["status"] == "CANCELLED"
        assert rescheduled.code == "STATE_TRANSITION_ERROR"
        assert reverted.data["status"] == "PENDING"
        assert reverted.data["cancellation_notes"] is None

    def test_history_is_newest_first(self):
        self.service.assign_technician(self.order_id, AssignTechnicianRequest(technician_id="tech-1"), "u1")
        self.clock.now = TS + timedelta(hours=1)
        self.service.change_status(self.order_id, ChangeStatusRequest(
            status=OrderStatus.FACTURADO, presupuesto_amount=Decimal("30")
        ), "u1")

        history = self.service.get_status_history(self.order_id).data

        assert [h["status"] for h in history] == ["FACTURADO", "ASSIGNED", "PENDING"]

    def test_list_orders_filters_by_status(self):
        self.service.create_order(_create_request(is_pre_order=True), "u1")

        assert len(self.service.list_orders().data) == 2
        assert [o["status"] for o in self.service.list_orders(OrderStatus.PREORDER).data] == ["PREORDER"]

    def test_warranty_orders_sorted_by_priority(self):
        other_id = self.service.create_order(_create_request(), "u1").data["id"]
        for order_id, priority in ((self.order_id, "BAJA"), (other_id, "ALTA")):
            order = self.repository.find_by_id(order_id)
            order.status = OrderStatus.DELIVERED
            order.garantia_ilimitada = True
            self.repository.save(order)
            self.service.apply_warranty_damage(
                order_id, ApplyWarrantyDamageRequest(reason="Falla repetida", priority=priority), "u1"
            )

        warranties = self.service.list_warranty_orders().data

        assert [o["id"] for o in warranties] == [other_id, self.order_id]

    def test_delete_cascades(self):
        self.service.record_payment(
            self.order_id, RecordPaymentRequest(amount=Decimal("10"), method=PaymentMethod.CASH), "u1"
        )

        result = self.service.delete_order(self.order_id, "u-admin")

        assert result.success
        assert result.data["message"] == "Orden #LAV-000001 eliminada correctamente"
        assert self.service.get_order(self.order_id).code == "NOT_FOUND"
        assert not self.repository.exists(self.order_id)
