from datetime import datetime, timedelta, timezone

from service_orders.domain import (
    ClientContact,
    Money,
    OrderStatus,
    ServiceOrder,
    StatusHistoryLog
)

TS = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


class TestStatusHistoryLog:
    def setup_method(self):
        self.log = StatusHistoryLog()
        self.order = ServiceOrder.create(
            order_number="ORD-000001",
            client=ClientContact(name="Juan Ríos", phone="04240000000"),
            status=OrderStatus.PENDING,
            actor_id="u-admin",
            timestamp=TS
        )

    def test_list_is_newest_first(self):
        self.log.append(self.order, OrderStatus.PENDING, "creada", "u1", TS)
        self.log.append(self.order, OrderStatus.ASSIGNED, "asignada", "u1", TS + timedelta(hours=1))
        self.log.append(self.order, OrderStatus.FACTURADO, "facturada", "u1", TS + timedelta(hours=2))

        assert [e.status for e in self.log.list(self.order)] == [
            OrderStatus.FACTURADO,
            OrderStatus.ASSIGNED,
            OrderStatus.PENDING
        ]

    def test_entries_with_same_timestamp_keep_append_order_reversed(self):
        first = self.log.append(self.order, OrderStatus.CANCELLED, "primera", "u1", TS)
        second = self.log.append(self.order, OrderStatus.PENDING, "segunda", "u1", TS)

        assert self.log.list(self.order) == [second, first]

    def test_entry_keeps_presupuesto(self):
        entry = self.log.append(
            self.order, OrderStatus.FACTURADO, "facturada", "u1", TS, Money.from_string("45.5")
        )

        assert entry.to_dict()["presupuesto_amount"] == "45.50"
        assert entry.created_by == "u1"

    def test_list_does_not_reorder_stored_history(self):
        self.log.append(self.order, OrderStatus.PENDING, "a", "u1", TS)
        self.log.append(self.order, OrderStatus.ASSIGNED, "b", "u1", TS + timedelta(minutes=5))

        self.log.list(self.order)

        assert [e.notes for e in self.order.history] == ["a", "b"]
