from typing import Any, Optional

from pydantic import BaseModel

from ...domain import DomainError


class Result(BaseModel):
    success: bool
    data: Any = None
    error: Optional[str] = None
    code: Optional[str] = None
    details: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None) -> 'Result':
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: DomainError, details: Optional[str] = None) -> 'Result':
        return cls(
            success=False,
            error=error.message,
            code=error.code.value,
            details=details
        )
