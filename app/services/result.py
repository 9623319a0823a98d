"""
Explicit success/error results for service operations.
Services return Ok(value) or Err(kind, message); routers map the kind to an HTTP status.
"""
import enum
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from fastapi.responses import JSONResponse

T = TypeVar("T")


class ErrorKind(str, enum.Enum):
    MISSING_INPUT = "missing_input"
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    STORAGE = "storage"
    DATABASE = "database"
    UNEXPECTED = "unexpected"


HTTP_STATUS_BY_KIND = {
    ErrorKind.MISSING_INPUT: 400,
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.STORAGE: 500,
    ErrorKind.DATABASE: 500,
    ErrorKind.UNEXPECTED: 500,
}


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str

    @property
    def ok(self) -> bool:
        return False

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]


Result = Union[Ok[Any], Err]


def error_response(err: Err) -> JSONResponse:
    """HTTP body for a failed operation: {"error": message, "kind": kind} with the kind's status."""
    return JSONResponse(status_code=err.status_code, content={"error": err.message, "kind": err.kind.value})
