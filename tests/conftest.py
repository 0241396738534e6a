"""Root test fixtures shared across all test types.

This conftest contains fixtures that can be used by both unit and integration tests.
Database-specific fixtures are in tests/integration/conftest.py.
"""

import os

# Set env before any app imports so Settings and the module-level app pick it up
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

# ruff: noqa: E402 - Imports must be after env var setup
import pytest
import structlog
from structlog.testing import CapturingLogger

from src.studio.core.config import get_settings
from src.studio.core.error_classifier import ErrorClassifier, ErrorHistory
from src.studio.core.logging import clear_request_context
from src.studio.services import EntityCache

# Clear settings cache to ensure test environment variables are picked up
get_settings.cache_clear()


@pytest.fixture
def error_history() -> ErrorHistory:
    return ErrorHistory(capacity=50)


@pytest.fixture
def classifier(error_history: ErrorHistory) -> ErrorClassifier:
    return ErrorClassifier(error_history)


@pytest.fixture
def cache() -> EntityCache:
    return EntityCache()


@pytest.fixture
def capturing_logger():
    """Route structlog output to a CapturingLogger for the duration of a test."""
    cap_logger = CapturingLogger()
    old_config = structlog.get_config()

    structlog.configure(
        processors=[structlog.contextvars.merge_contextvars],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=lambda *args, **kwargs: cap_logger,
        cache_logger_on_first_use=False,
    )

    clear_request_context()
    yield cap_logger
    clear_request_context()
    structlog.configure(**old_config)

