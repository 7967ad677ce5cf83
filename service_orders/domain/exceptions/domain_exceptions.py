from dataclasses import dataclass
from typing import Any, Optional

from ..enums import ErrorCode


@dataclass
class DomainError:
    operation: str
    order_id: str
    code: ErrorCode
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "op": self.operation,
            "order_id": self.order_id,
            "code": self.code.value,
            "message": self.message
        }


class DomainException(Exception):
    code: ErrorCode

    def __init__(self, error: DomainError, details: Optional[str] = None):
        self.error = error
        self.details = details
        super().__init__(error.message)

    @classmethod
    def build(
        cls,
        operation: str,
        order_id: str,
        message: str,
        details: Optional[str] = None
    ) -> 'DomainException':
        return cls(DomainError(
            operation=operation,
            order_id=order_id,
            code=cls.code,
            message=message
        ), details)


class ValidationException(DomainException):
    code = ErrorCode.VALIDATION_ERROR


class StateTransitionException(DomainException):
    code = ErrorCode.STATE_TRANSITION_ERROR


class EligibilityException(DomainException):
    code = ErrorCode.ELIGIBILITY_ERROR


class OrderNotFoundException(DomainException):
    code = ErrorCode.NOT_FOUND


class PersistenceException(DomainException):
    code = ErrorCode.PERSISTENCE_ERROR


class NotificationException(DomainException):
    code = ErrorCode.NOTIFICATION_ERROR
