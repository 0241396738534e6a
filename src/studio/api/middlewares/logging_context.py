"""Logging context middleware for request correlation."""

from uuid import UUID

from asgi_correlation_id import correlation_id
from fastapi import Request, Response
from starlette.middleware.base import RequestResponseEndpoint

from src.studio.core.logging import (
    bind_request_context,
    bind_user_context,
    clear_request_context,
    get_logger,
)
from src.studio.core.validators import is_valid_entity_id

logger = get_logger(__name__)


async def logging_context_middleware(
    request: Request, call_next: RequestResponseEndpoint
) -> Response:
    """Bind request_id and any caller id to log context and log each request outcome.

    A caller id is bound even on routes that do not require one, so errors
    raised there are attributed to that caller in the error history.
    """
    clear_request_context()
    bind_request_context(correlation_id.get())
    user_id = request.headers.get("x-user-id")
    if is_valid_entity_id(user_id):
        bind_user_context(UUID(user_id))
    try:
        response = await call_next(request)
        logger.debug(
            "Request handled",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
        )
        return response
    finally:
        clear_request_context()
