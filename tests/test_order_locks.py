import threading
from decimal import Decimal

import pytest

from service_orders.application import OrderLocks, ServiceOrderService
from service_orders.application.dtos import ChangeStatusRequest, ClientData, CreateOrderRequest
from service_orders.domain import OrderStatus
from service_orders.infrastructure.adapters import InMemoryServiceOrderRepository


class TestOrderLocks:
    def setup_method(self):
        self.locks = OrderLocks()

    def test_released_ids_leave_no_entries(self):
        for i in range(1000):
            with self.locks.hold(f"order-{i}"):
                assert len(self.locks) == 1

        assert len(self.locks) == 0

    def test_entry_is_released_when_body_raises(self):
        with pytest.raises(RuntimeError):
            with self.locks.hold("order-1"):
                raise RuntimeError("boom")

        assert len(self.locks) == 0

    def test_waiter_keeps_entry_until_it_is_done(self):
        entered = threading.Event()
        release = threading.Event()
        order = []

        def first():
            with self.locks.hold("order-1"):
                entered.set()
                release.wait(timeout=5)
                order.append("first")

        def second():
            entered.wait(timeout=5)
            with self.locks.hold("order-1"):
                order.append("second")

        threads = [threading.Thread(target=first), threading.Thread(target=second)]
        for thread in threads:
            thread.start()
        entered.wait(timeout=5)
        assert len(self.locks) == 1

        release.set()
        for thread in threads:
            thread.join()

        assert order == ["first", "second"]
        assert len(self.locks) == 0

    def test_service_leaves_no_entries_behind(self):
        service = ServiceOrderService(InMemoryServiceOrderRepository(), locks=self.locks)
        order_id = service.create_order(CreateOrderRequest(
            client=ClientData(name="Ana Pérez", phone="04141112233"),
            total_amount=Decimal("100")
        ), "u1").data["id"]

        missing = service.change_status("missing", ChangeStatusRequest(status=OrderStatus.ASSIGNED), "u1")
        deleted = service.delete_order(order_id, "u1")

        assert missing.code == "NOT_FOUND"
        assert deleted.success
        assert len(self.locks) == 0
