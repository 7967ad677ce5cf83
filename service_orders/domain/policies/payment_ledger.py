from datetime import datetime
from typing import Optional

from ..entities.payment import Payment
from ..entities.service_order import ServiceOrder
from ..enums import NotificationType, PaymentMethod, PaymentStatus
from ..exceptions.domain_exceptions import ValidationException
from ..value_objects.money import Money


def derive_payment_status(paid_amount: Money, total_amount: Money) -> PaymentStatus:
    if paid_amount.is_greater_than_or_equal(total_amount):
        return PaymentStatus.PAID
    if paid_amount.is_positive():
        return PaymentStatus.PARTIAL
    return PaymentStatus.PENDING


class PaymentLedger:
    """Additive payment records and the payment status derived from them.

    Payments never touch the order status. `paid_amount` only grows here.
    """

    def record_payment(
        self,
        order: ServiceOrder,
        amount: Money,
        method: PaymentMethod,
        actor_id: str,
        timestamp: datetime,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
        operation: str = "RECORD_PAYMENT"
    ) -> Payment:
        if not amount.is_positive():
            raise ValidationException.build(
                operation,
                order.id,
                "El monto del pago debe ser mayor a cero."
            )

        payment = Payment.create(
            service_order_id=order.id,
            amount=amount,
            method=method,
            actor_id=actor_id,
            timestamp=timestamp,
            reference=reference,
            notes=notes
        )
        order.payments.append(payment)
        order.paid_amount = order.paid_amount.add(amount)
        self.refresh_status(order)
        order.touch(actor_id, timestamp)

        order.record_event(NotificationType.PAYMENT_RECORDED, timestamp, {
            "amount": str(amount),
            "method": method.value,
            "reference": reference,
            "notes": notes,
            "payment_status": order.payment_status.value,
            "paid_amount": str(order.paid_amount),
            "total_amount": str(order.total_amount),
            "remaining": str(self.remaining_balance(order)),
        })
        return payment

    def refresh_status(self, order: ServiceOrder) -> PaymentStatus:
        order.payment_status = derive_payment_status(order.paid_amount, order.total_amount)
        return order.payment_status

    @staticmethod
    def remaining_balance(order: ServiceOrder) -> Money:
        if order.paid_amount.is_greater_than_or_equal(order.total_amount):
            return Money.zero()
        return order.total_amount.subtract(order.paid_amount)
