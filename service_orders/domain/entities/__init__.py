from .payment import Payment
from .technician_assignment import TechnicianAssignment
from .status_history_entry import StatusHistoryEntry
from .delivery_note import DeliveryNote
from .service_order import ServiceOrder, ClientContact

__all__ = [
    "Payment",
    "TechnicianAssignment",
    "StatusHistoryEntry",
    "DeliveryNote",
    "ServiceOrder",
    "ClientContact"
]
