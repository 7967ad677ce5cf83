from .order_locks import OrderLocks
from .order_service import ServiceOrderService, utc_now

__all__ = ["OrderLocks", "ServiceOrderService", "utc_now"]
