from .status_history import StatusHistoryLog
from .state_machine import (
    OrderStateMachine,
    StatusChange,
    TransitionPlan,
    TRANSITIONS,
    NO_APROBADO_VISIT_FEE,
    MIN_REASON_LENGTH
)
from .payment_ledger import PaymentLedger, derive_payment_status
from .warranty_policy import WarrantyPolicy
from .cancellation_policy import CancellationPolicy
from .technician_assignments import TechnicianAssignmentTracker

__all__ = [
    "StatusHistoryLog",
    "OrderStateMachine",
    "StatusChange",
    "TransitionPlan",
    "TRANSITIONS",
    "NO_APROBADO_VISIT_FEE",
    "MIN_REASON_LENGTH",
    "PaymentLedger",
    "derive_payment_status",
    "WarrantyPolicy",
    "CancellationPolicy",
    "TechnicianAssignmentTracker"
]
