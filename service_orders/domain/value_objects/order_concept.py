from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .money import Money

IVA_RATE = Decimal("1.16")


@dataclass(frozen=True)
class OrderConcept:
    """Line-item description of the quoted or invoiced work."""

    header: str
    text: str
    amount: Money
    include_iva: bool = False

    @classmethod
    def create(
        cls,
        header: str = "",
        text: str = "",
        amount: Money | Decimal | str | int = "0",
        include_iva: bool = False
    ) -> 'OrderConcept':
        return cls(
            header=header or "",
            text=text or "",
            amount=Money.of(amount),
            include_iva=include_iva
        )

    @property
    def total(self) -> Money:
        if self.include_iva:
            return self.amount.multiply(IVA_RATE)
        return self.amount

    def with_iva(self, include_iva: bool) -> 'OrderConcept':
        return OrderConcept(
            header=self.header,
            text=self.text,
            amount=self.amount,
            include_iva=include_iva
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "header": self.header,
            "text": self.text,
            "amount": str(self.amount),
            "include_iva": self.include_iva,
            "total": str(self.total)
        }
