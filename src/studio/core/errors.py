"""Error taxonomy and domain exceptions.

Every failure that crosses a layer boundary is either raised as a
``StudioError`` subclass or converted into one by ``ErrorClassifier``.
``AppError`` is the immutable, serializable shape handed to clients and kept
in the diagnostic history.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    """What went wrong, independent of where."""

    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STORAGE = "storage"
    SERVER = "server"
    NETWORK = "network"
    UNKNOWN = "unknown"


class ErrorSeverity(StrEnum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


# HTTP status used when a failure carries no status of its own
DEFAULT_STATUS: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.AUTHORIZATION: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.STORAGE: 500,
    ErrorKind.SERVER: 500,
    ErrorKind.NETWORK: 503,
    ErrorKind.UNKNOWN: 500,
}


@dataclass(frozen=True)
class AppError:
    """Uniform classified error."""

    kind: ErrorKind
    severity: ErrorSeverity
    message: str
    timestamp: datetime
    recoverable: bool
    code: int | str | None = None
    endpoint: str | None = None
    user_id: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def status_code(self) -> int:
        """HTTP status for this error."""
        if isinstance(self.code, int) and 400 <= self.code <= 599:
            return self.code
        return DEFAULT_STATUS[self.kind]

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "recoverable": self.recoverable,
            "endpoint": self.endpoint,
        }


class StudioError(Exception):
    """Base class for domain failures that already know their kind."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        *,
        code: int | str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class ValidationFailed(StudioError):
    kind = ErrorKind.VALIDATION


class EntityNotFound(StudioError):
    kind = ErrorKind.NOT_FOUND


class NotAuthorized(StudioError):
    kind = ErrorKind.AUTHORIZATION


class NotAuthenticated(StudioError):
    kind = ErrorKind.AUTHENTICATION


class StorageFailure(StudioError):
    kind = ErrorKind.STORAGE


class NetworkFailure(StudioError):
    kind = ErrorKind.NETWORK


class ServerFailure(StudioError):
    kind = ErrorKind.SERVER


class ClassifiedError(Exception):
    """Carries an already-classified ``AppError`` up the stack.

    Raised by the access layer so that handlers above it do not classify
    (and record) the same failure twice.
    """

    def __init__(self, error: AppError, cause: BaseException | None = None):
        super().__init__(error.message)
        self.error = error
        self.cause = cause

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind
