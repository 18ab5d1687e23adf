"""Result type returned by service operations that can fail.

Failures carry an ErrorKind so callers can map them to their own error
channel (exit codes, HTTP statuses) without inspecting message text.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Kinds of failure a service operation can report."""

    NOT_FOUND = "not_found"
    INVALID_PARENT = "invalid_parent"


@dataclass(frozen=True)
class ServiceError:
    """Structured error payload within a Result."""

    kind: ErrorKind
    message: str


class ServiceFailure(Exception):
    """Raised by Result.unwrap() when the result is a failure."""

    def __init__(self, error: ServiceError):
        super().__init__(error.message)
        self.error = error

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind


@dataclass(frozen=True)
class Result:
    """Outcome of a service operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"calculate_sum"``).
        value: Operation payload on success.
        error: Structured error if ``ok`` is False.
    """

    ok: bool
    op: str
    value: Any = None
    error: Optional[ServiceError] = None

    @classmethod
    def success(cls, op: str, value: Any = None) -> "Result":
        return cls(ok=True, op=op, value=value)

    @classmethod
    def failure(cls, op: str, kind: ErrorKind, message: str) -> "Result":
        return cls(ok=False, op=op, error=ServiceError(kind=kind, message=message))

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error else None

    def unwrap(self) -> Any:
        """Return the value, or raise ServiceFailure if the operation failed."""
        if not self.ok:
            raise ServiceFailure(self.error)
        return self.value
