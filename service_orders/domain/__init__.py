from .entities import (
    ServiceOrder,
    ClientContact,
    Payment,
    TechnicianAssignment,
    StatusHistoryEntry,
    DeliveryNote
)
from .value_objects import Money, OrderConcept
from .enums import (
    OrderStatus,
    PaymentStatus,
    PaymentMethod,
    WarrantyPriority,
    CancellationType,
    NotificationType,
    Audience,
    ErrorCode
)
from .events import NotificationEvent
from .exceptions import (
    DomainError,
    DomainException,
    ValidationException,
    StateTransitionException,
    EligibilityException,
    OrderNotFoundException,
    PersistenceException,
    NotificationException
)
from .policies import (
    StatusHistoryLog,
    OrderStateMachine,
    StatusChange,
    TransitionPlan,
    PaymentLedger,
    WarrantyPolicy,
    CancellationPolicy,
    TechnicianAssignmentTracker
)
from .ports import (
    ServiceOrderRepository,
    MessageSender,
    NotificationPublisher,
    TechnicianDirectory,
    TechnicianContact
)

__all__ = [
    "ServiceOrder",
    "ClientContact",
    "Payment",
    "TechnicianAssignment",
    "StatusHistoryEntry",
    "DeliveryNote",
    "Money",
    "OrderConcept",
    "OrderStatus",
    "PaymentStatus",
    "PaymentMethod",
    "WarrantyPriority",
    "CancellationType",
    "NotificationType",
    "Audience",
    "ErrorCode",
    "NotificationEvent",
    "DomainError",
    "DomainException",
    "ValidationException",
    "StateTransitionException",
    "EligibilityException",
    "OrderNotFoundException",
    "PersistenceException",
    "NotificationException",
    "StatusHistoryLog",
    "OrderStateMachine",
    "StatusChange",
    "TransitionPlan",
    "PaymentLedger",
    "WarrantyPolicy",
    "CancellationPolicy",
    "TechnicianAssignmentTracker",
    "ServiceOrderRepository",
    "MessageSender",
    "NotificationPublisher",
    "TechnicianDirectory",
    "TechnicianContact"
]
