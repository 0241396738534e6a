"""Error classification, bounded error history and user-facing guidance."""

from collections import deque
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode
from uuid import UUID

from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    MultipleResultsFound,
    NoResultFound,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.studio.core.errors import (
    AppError,
    ClassifiedError,
    ErrorKind,
    ErrorSeverity,
    StudioError,
)
from src.studio.core.logging import current_user_id, get_logger
from src.studio.models.base import utc_now_aware

logger = get_logger(__name__)

DEFAULT_HISTORY_SIZE = 50

RECOVERABLE_KINDS = frozenset(
    {ErrorKind.NETWORK, ErrorKind.STORAGE, ErrorKind.SERVER, ErrorKind.AUTHENTICATION}
)

# Kinds whose raw message is safe to show to the caller
_PASSTHROUGH_MESSAGE_KINDS = frozenset(
    {ErrorKind.VALIDATION, ErrorKind.NOT_FOUND, ErrorKind.AUTHENTICATION}
)

_BASE_SEVERITY: dict[ErrorKind, ErrorSeverity] = {
    ErrorKind.AUTHENTICATION: ErrorSeverity.WARNING,
    ErrorKind.AUTHORIZATION: ErrorSeverity.WARNING,
    ErrorKind.VALIDATION: ErrorSeverity.WARNING,
    ErrorKind.NOT_FOUND: ErrorSeverity.WARNING,
    ErrorKind.STORAGE: ErrorSeverity.ERROR,
    ErrorKind.SERVER: ErrorSeverity.ERROR,
    ErrorKind.NETWORK: ErrorSeverity.ERROR,
    ErrorKind.UNKNOWN: ErrorSeverity.ERROR,
}

_FRIENDLY_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.AUTHENTICATION: "You need to sign in to access this resource.",
    ErrorKind.AUTHORIZATION: "You do not have permission to access this resource.",
    ErrorKind.VALIDATION: "The provided data is invalid or incomplete.",
    ErrorKind.NOT_FOUND: "The requested resource could not be found.",
    ErrorKind.STORAGE: "There was an issue with the storage operation. Please try again.",
    ErrorKind.NETWORK: "Network connection issue. Please check your internet connection.",
    ErrorKind.SERVER: "There was an issue with the server.",
    ErrorKind.UNKNOWN: "An unexpected error occurred. Please try again later.",
}

_RECOVERY_SUGGESTIONS: dict[ErrorKind, tuple[str, ...]] = {
    ErrorKind.AUTHENTICATION: (
        "Sign in to your account",
        "Check if your session has expired",
        "Clear your browser cookies and try again",
    ),
    ErrorKind.AUTHORIZATION: (
        "Check if you have the necessary permissions",
        "Contact an administrator if you need access",
        "Try signing in with a different account",
    ),
    ErrorKind.VALIDATION: (
        "Check the provided information for errors",
        "Ensure all required fields are filled out",
        "Try again with valid data",
    ),
    ErrorKind.NOT_FOUND: (
        "Check if the URL is correct",
        "The resource may have been moved or deleted",
        "Return to the dashboard and try again",
    ),
    ErrorKind.STORAGE: (
        "Try again in a few moments",
        "Refresh the page",
        "Contact support if the issue persists",
    ),
    ErrorKind.NETWORK: (
        "Check your internet connection",
        "Refresh the page",
        "Try again in a few moments",
    ),
    ErrorKind.SERVER: (
        "Refresh the page",
        "Try again in a few moments",
        "Contact support if the issue persists",
    ),
    ErrorKind.UNKNOWN: (
        "Refresh the page",
        "Try again later",
        "Clear your browser cache",
        "Contact support if the issue persists",
    ),
}


def friendly_message(kind: ErrorKind, code: int | str | None = None) -> str:
    """User-facing text for an error kind."""
    if kind == ErrorKind.SERVER and code == 500:
        return "The server encountered an unexpected error. Please try again later."
    return _FRIENDLY_MESSAGES[kind]


def recovery_suggestions(kind: ErrorKind) -> list[str]:
    """Ordered recovery hints for an error kind."""
    return list(_RECOVERY_SUGGESTIONS[kind])


def derive_severity(kind: ErrorKind, code: int | str | None = None) -> ErrorSeverity:
    """Severity from kind, raised or lowered by a numeric HTTP-style status."""
    if isinstance(code, int):
        if code >= 500:
            return ErrorSeverity.CRITICAL if kind == ErrorKind.SERVER else ErrorSeverity.ERROR
        if 400 <= code < 500:
            return ErrorSeverity.WARNING
    return _BASE_SEVERITY[kind]


def kind_for_status(status_code: int) -> ErrorKind:
    if status_code == 401:
        return ErrorKind.AUTHENTICATION
    if status_code == 403:
        return ErrorKind.AUTHORIZATION
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code in (400, 409, 422):
        return ErrorKind.VALIDATION
    if status_code >= 500:
        return ErrorKind.SERVER
    return ErrorKind.UNKNOWN


def public_message(error: AppError) -> str:
    """Message safe to return to the client.

    Authorization never reveals whether the entity exists; storage, network
    and server failures are reduced to a generic "try again".
    """
    if error.kind in _PASSTHROUGH_MESSAGE_KINDS and error.message:
        return error.message
    return friendly_message(error.kind, error.code)


def error_view_url(
    error: AppError,
    project_id: UUID | str | None = None,
    base_path: str = "/error",
) -> str:
    """Path of the generic client error view for this error."""
    params: dict[str, str] = {
        "message": public_message(error),
        "code": "" if error.code is None else str(error.code),
        "kind": error.kind.value,
    }
    if project_id:
        params["projectId"] = str(project_id)
    return f"{base_path}?{urlencode(params)}"


@dataclass(frozen=True)
class ErrorContext:
    """Where a failure happened."""

    operation: str | None = None
    endpoint: str | None = None
    entity_kind: str | None = None
    entity_id: str | None = None

    def as_details(self) -> dict[str, Any]:
        return {k: v for k, v in self.__dict__.items() if v is not None}


class ErrorHistory:
    """Bounded, most-recent-first record of classified errors.

    Lives as long as the application that owns it.
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_SIZE):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._entries: deque[AppError] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    def record(self, error: AppError) -> None:
        # appendleft on a bounded deque drops the oldest entry from the right
        self._entries.appendleft(error)

    def entries(self, limit: int | None = None, user_id: str | None = None) -> list[AppError]:
        """Most recent first, optionally only the errors raised for one caller."""
        items = list(self._entries)
        if user_id is not None:
            items = [e for e in items if e.user_id == user_id]
        return items if limit is None else items[:limit]

    def clear(self, user_id: str | None = None) -> None:
        if user_id is None:
            self._entries.clear()
            return
        kept = [e for e in self._entries if e.user_id != user_id]
        self._entries.clear()
        self._entries.extend(kept)

    def __len__(self) -> int:
        return len(self._entries)


def _validation_message(errors: Any) -> str:
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "Invalid request"


def _kind_and_code(exc: BaseException) -> tuple[ErrorKind, int | str | None, str]:
    """Map a raw exception to (kind, code, message)."""
    if isinstance(exc, StudioError):
        return exc.kind, exc.code, exc.message
    if isinstance(exc, RequestValidationError):
        return ErrorKind.VALIDATION, 400, _validation_message(exc.errors())
    if isinstance(exc, PydanticValidationError):
        return ErrorKind.VALIDATION, 400, _validation_message(exc.errors())
    if isinstance(exc, StarletteHTTPException):
        return kind_for_status(exc.status_code), exc.status_code, str(exc.detail)
    if isinstance(exc, NoResultFound):
        return ErrorKind.NOT_FOUND, 404, str(exc)
    if isinstance(exc, MultipleResultsFound):
        return ErrorKind.STORAGE, "multiple_rows", str(exc)
    if isinstance(exc, DisconnectionError | PoolTimeoutError):
        return ErrorKind.NETWORK, None, str(exc)
    if isinstance(exc, DBAPIError):
        if exc.connection_invalidated or isinstance(exc, InterfaceError):
            return ErrorKind.NETWORK, None, str(exc.orig or exc)
        if isinstance(exc, IntegrityError):
            return ErrorKind.STORAGE, "integrity_error", str(exc.orig or exc)
        return ErrorKind.STORAGE, None, str(exc.orig or exc)
    if isinstance(exc, SQLAlchemyError):
        return ErrorKind.STORAGE, None, str(exc)
    if isinstance(exc, ConnectionError | TimeoutError | OSError):
        return ErrorKind.NETWORK, None, str(exc) or type(exc).__name__
    return ErrorKind.UNKNOWN, None, str(exc) or type(exc).__name__


class ErrorClassifier:
    """Turns any failure into an ``AppError`` and records it."""

    def __init__(self, history: ErrorHistory):
        self.history = history

    def classify(
        self,
        raw: BaseException | str,
        context: ErrorContext | None = None,
        *,
        severity: ErrorSeverity | None = None,
    ) -> AppError:
        """Classify ``raw``, append it to the history and log it.

        An already-classified error is returned as-is and not recorded again.
        """
        if isinstance(raw, ClassifiedError):
            return raw.error

        if isinstance(raw, str):
            kind, code, message = ErrorKind.UNKNOWN, None, raw
            details: dict[str, Any] = {}
        else:
            kind, code, message = _kind_and_code(raw)
            details = {"exception_type": type(raw).__name__}
            if isinstance(raw, StudioError):
                details.update(raw.details)

        if context is not None:
            details.update(context.as_details())

        error = AppError(
            kind=kind,
            severity=severity or derive_severity(kind, code),
            message=message or friendly_message(kind, code),
            timestamp=utc_now_aware(),
            recoverable=kind in RECOVERABLE_KINDS,
            code=code,
            endpoint=context.endpoint if context else None,
            user_id=current_user_id(),
            details=details,
        )
        self.history.record(error)
        self._log(error, raw)
        return error

    def to_exception(
        self,
        raw: BaseException,
        context: ErrorContext | None = None,
    ) -> ClassifiedError:
        """Classify and wrap for re-raising."""
        if isinstance(raw, ClassifiedError):
            return raw
        return ClassifiedError(self.classify(raw, context), raw)

    def _log(self, error: AppError, raw: BaseException | str) -> None:
        fields = {
            "kind": error.kind.value,
            "severity": error.severity.value,
            "code": error.code,
            **error.details,
        }
        if error.severity == ErrorSeverity.CRITICAL or error.severity == ErrorSeverity.ERROR:
            exc_info = raw if isinstance(raw, BaseException) else None
            logger.error(error.message, exc_info=exc_info, **fields)
        elif error.severity == ErrorSeverity.WARNING:
            logger.warning(error.message, **fields)
        else:
            logger.info(error.message, **fields)
