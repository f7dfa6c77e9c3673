"""Error kinds and the result type shared across service boundaries."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(Enum):
    """Failure categories surfaced to the user."""

    ANALYSIS_FAILURE = "analysis_failure"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    MALFORMED_STORED_RECORD = "malformed_stored_record"
    SHARE_REFERENCE_NOT_FOUND = "share_reference_not_found"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    VALIDATION_FAILURE = "validation_failure"


class LedgerError(Exception):
    """Base class for errors raised inside adapters and pure functions."""

    kind: ErrorKind


class AnalysisFailure(LedgerError):
    """The image or MET service was unreachable or returned unusable data."""

    kind = ErrorKind.ANALYSIS_FAILURE


class CapacityExceeded(LedgerError):
    """A durable-storage write exceeded the medium's quota."""

    kind = ErrorKind.CAPACITY_EXCEEDED


class MalformedStoredRecord(LedgerError):
    """A stored record could not be parsed."""

    kind = ErrorKind.MALFORMED_STORED_RECORD


class ValidationFailure(LedgerError):
    """Required input was missing before a derived computation."""

    kind = ErrorKind.VALIDATION_FAILURE


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a payload."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying its kind and a user-facing message."""

    kind: ErrorKind
    message: str
    detail: str | None = None

    @property
    def is_ok(self) -> bool:
        return False

    @classmethod
    def from_exception(cls, exc: LedgerError) -> "Err":
        """Build an error outcome from a raised ledger error."""
        return cls(kind=exc.kind, message=str(exc))


Result = Ok[T] | Err
