# docportal/core/errors.py
"""Typed errors and the Result wrapper returned by every core operation.

Core functions never raise for expected failures; they hand back a Result
carrying either the new value or one (or, for template application, several)
PortalError instances. Callers that prefer exceptions use ``unwrap()``.
"""
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

T = TypeVar("T")


class PortalError(Exception):
    code = "portal_error"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, **self.details}


class ValidationError(PortalError):
    code = "validation_error"


class DuplicateNameError(PortalError):
    code = "duplicate_name"


class NotFoundError(PortalError):
    code = "not_found"


class InvalidStateError(PortalError):
    code = "invalid_state"


class InvalidParentError(PortalError):
    code = "invalid_parent"


class PermissionDeniedError(PortalError):
    code = "permission_denied"


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Union[PortalError, List[PortalError], None] = None

    @classmethod
    def success(cls, value: T = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: Union[PortalError, List[PortalError]]) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def errors(self) -> List[PortalError]:
        if self.error is None:
            return []
        if isinstance(self.error, list):
            return list(self.error)
        return [self.error]

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.errors[0]
        return self.value
