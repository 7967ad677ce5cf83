from .domain_exceptions import (
    DomainError,
    DomainException,
    ValidationException,
    StateTransitionException,
    EligibilityException,
    OrderNotFoundException,
    PersistenceException,
    NotificationException
)

__all__ = [
    "DomainError",
    "DomainException",
    "ValidationException",
    "StateTransitionException",
    "EligibilityException",
    "OrderNotFoundException",
    "PersistenceException",
    "NotificationException"
]
