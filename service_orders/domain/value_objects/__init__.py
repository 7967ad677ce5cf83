from .money import Money
from .order_concept import OrderConcept, IVA_RATE

__all__ = ["Money", "OrderConcept", "IVA_RATE"]
