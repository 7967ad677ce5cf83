import pytest
from datetime import datetime, timezone

from service_orders.domain import (
    ClientContact,
    Money,
    NotificationType,
    OrderStatus,
    PaymentLedger,
    PaymentMethod,
    PaymentStatus,
    ServiceOrder
)
from service_orders.domain.exceptions import ValidationException
from service_orders.domain.policies import derive_payment_status

TS = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


class TestDerivePaymentStatus:
    def test_nothing_paid_is_pending(self):
        assert derive_payment_status(Money.zero(), Money.from_string("100")) == PaymentStatus.PENDING

    def test_zero_total_is_paid(self):
        assert derive_payment_status(Money.zero(), Money.zero()) == PaymentStatus.PAID

    def test_partial_and_paid(self):
        total = Money.from_string("100")
        assert derive_payment_status(Money.from_string("40"), total) == PaymentStatus.PARTIAL
        assert derive_payment_status(Money.from_string("100"), total) == PaymentStatus.PAID
        assert derive_payment_status(Money.from_string("130"), total) == PaymentStatus.PAID


class TestPaymentLedger:
    def setup_method(self):
        self.ledger = PaymentLedger()
        self.order = ServiceOrder.create(
            order_number="NEV-000003",
            client=ClientContact(name="Luis Mora", phone="04125550000", whatsapp="+584125550000"),
            status=OrderStatus.REPARANDO,
            actor_id="u-admin",
            timestamp=TS,
            total_amount=Money.from_string("100.00")
        )

    def test_two_payments_settle_the_order(self):
        self.ledger.record_payment(self.order, Money.from_string("40"), PaymentMethod.CASH, "u1", TS)

        assert self.order.paid_amount == Money.from_string("40.00")
        assert self.order.payment_status == PaymentStatus.PARTIAL

        self.ledger.record_payment(self.order, Money.from_string("60"), PaymentMethod.CARD, "u1", TS)

        assert self.order.paid_amount == Money.from_string("100.00")
        assert self.order.payment_status == PaymentStatus.PAID
        assert [p.method for p in self.order.payments] == [PaymentMethod.CASH, PaymentMethod.CARD]

    def test_non_positive_amount_is_rejected(self):
        for amount in ("0", "-5"):
            with pytest.raises(ValidationException) as exc_info:
                self.ledger.record_payment(
                    self.order, Money.from_string(amount), PaymentMethod.CASH, "u1", TS
                )
            assert exc_info.value.error.message == "El monto del pago debe ser mayor a cero."

        assert self.order.payments == []
        assert self.order.paid_amount == Money.zero()

    def test_payment_never_changes_order_status(self):
        self.ledger.record_payment(self.order, Money.from_string("100"), PaymentMethod.ZELLE, "u1", TS)

        assert self.order.status == OrderStatus.REPARANDO
        assert self.order.history == []

    def test_payment_event_carries_running_totals(self):
        self.ledger.record_payment(
            self.order,
            Money.from_string("25"),
            PaymentMethod.TRANSFER,
            "u1",
            TS,
            reference="REF-991"
        )
        events = self.order.pull_events()

        assert {e.event_type for e in events} == {NotificationType.PAYMENT_RECORDED}
        metadata = events[0].metadata
        assert metadata["amount"] == "25.00"
        assert metadata["method"] == "TRANSFER"
        assert metadata["reference"] == "REF-991"
        assert metadata["paid_amount"] == "25.00"
        assert metadata["remaining"] == "75.00"

    def test_overpayment_leaves_no_remaining_balance(self):
        self.ledger.record_payment(self.order, Money.from_string("150"), PaymentMethod.CASH, "u1", TS)

        assert self.ledger.remaining_balance(self.order) == Money.zero()
        assert self.order.payment_status == PaymentStatus.PAID
