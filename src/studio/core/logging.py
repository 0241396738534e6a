"""Structured logging and the per-request log context.

The request context (``request_id``, ``user_id``) lives in structlog's
contextvars. Besides decorating every log line, it tells the error
classifier which caller an error belongs to.
"""

import logging
import sys
from uuid import UUID

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, get_contextvars


def setup_logging(debug: bool = False) -> None:
    """Configure structlog and route stdlib logging through it.

    Args:
        debug: Colored console output when True, one JSON object per line otherwise.
    """
    log_level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    shared_processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if debug:
        processors = shared_processors + [structlog.dev.ConsoleRenderer(colors=True)]
    else:
        # Classified storage errors carry exc_info; JSON needs it as text
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("asyncpg").setLevel(logging.WARNING)
    # The logging-context middleware already reports every request
    logging.getLogger("uvicorn.access").setLevel(logging.DEBUG if debug else logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request_context(request_id: str | None) -> None:
    if request_id:
        bind_contextvars(request_id=request_id)


def bind_user_context(user_id: UUID) -> None:
    """Attribute subsequent log lines and classified errors to this caller."""
    bind_contextvars(user_id=str(user_id))


def current_user_id() -> str | None:
    """Caller bound to the current request, if any."""
    return get_contextvars().get("user_id")


def clear_request_context() -> None:
    clear_contextvars()
