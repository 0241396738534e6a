"""Exception handlers that render every failure as the standard envelope.

``{"message": ..., "error": {"kind", "code", "severity", "timestamp",
"recoverable", "request_id", "redirect"}}``
"""

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.studio.core.config import get_settings
from src.studio.core.error_classifier import (
    ErrorClassifier,
    ErrorContext,
    error_view_url,
    public_message,
)
from src.studio.core.errors import AppError, ClassifiedError, StudioError
from src.studio.core.logging import get_logger
from src.studio.schemas.responses import Envelope, ErrorBody

logger = get_logger(__name__)


def _originating_project(request: Request) -> str | None:
    return request.path_params.get("project_id") or request.query_params.get("projectId")


def error_response(
    request: Request,
    error: AppError,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    settings = get_settings()
    body = Envelope(
        message=public_message(error),
        error=ErrorBody(
            kind=error.kind,
            code=error.code,
            severity=error.severity,
            timestamp=error.timestamp,
            recoverable=error.recoverable,
            request_id=correlation_id.get(),
            redirect=error_view_url(
                error, _originating_project(request), settings.error_view_path
            ),
        ),
    )
    return JSONResponse(
        status_code=error.status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


def _classify(request: Request, exc: Exception) -> AppError:
    classifier: ErrorClassifier = request.app.state.classifier
    return classifier.classify(
        exc, ErrorContext(endpoint=f"{request.method} {request.url.path}")
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure handlers for classified, domain, validation and HTTP errors."""

    @app.exception_handler(ClassifiedError)
    async def classified_error_handler(request: Request, exc: ClassifiedError) -> JSONResponse:
        return error_response(request, exc.error)

    @app.exception_handler(StudioError)
    async def studio_error_handler(request: Request, exc: StudioError) -> JSONResponse:
        return error_response(request, _classify(request, exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return error_response(request, _classify(request, exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return error_response(request, _classify(request, exc), headers=exc.headers)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=correlation_id.get(),
            path=request.url.path,
        )
        return error_response(request, _classify(request, exc))
