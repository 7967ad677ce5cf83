from .commands import (
    ClientData,
    OrderConceptData,
    CreateOrderRequest,
    UpdateOrderDetailsRequest,
    ChangeStatusRequest,
    RecordPaymentRequest,
    AssignTechnicianRequest,
    DeactivateTechnicianRequest,
    SetWarrantyPeriodRequest,
    ApplyWarrantyDamageRequest,
    ResolveWarrantyRequest,
    CancelOrRescheduleRequest,
    CreateDeliveryNoteRequest,
    RegisterTechnicianRequest
)
from .responses import Result

__all__ = [
    "ClientData",
    "OrderConceptData",
    "CreateOrderRequest",
    "UpdateOrderDetailsRequest",
    "ChangeStatusRequest",
    "RecordPaymentRequest",
    "AssignTechnicianRequest",
    "DeactivateTechnicianRequest",
    "SetWarrantyPeriodRequest",
    "ApplyWarrantyDamageRequest",
    "ResolveWarrantyRequest",
    "CancelOrRescheduleRequest",
    "CreateDeliveryNoteRequest",
    "RegisterTechnicianRequest",
    "Result"
]
