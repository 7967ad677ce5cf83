from .use_cases import ServiceOrderService, OrderLocks
from .dtos import (
    ChangeStatusRequest,
    CreateOrderRequest,
    RecordPaymentRequest,
    Result
)

__all__ = [
    "ServiceOrderService",
    "OrderLocks",
    "ChangeStatusRequest",
    "CreateOrderRequest",
    "RecordPaymentRequest",
    "Result"
]
