from .repositories import ServiceOrderRepository
from .notifications import (
    MessageSender,
    NotificationPublisher,
    TechnicianDirectory,
    TechnicianContact
)

__all__ = [
    "ServiceOrderRepository",
    "MessageSender",
    "NotificationPublisher",
    "TechnicianDirectory",
    "TechnicianContact"
]
