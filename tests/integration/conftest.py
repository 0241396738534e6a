"""Integration test fixtures for database and HTTP client operations.

Storage is a throwaway SQLite file per test (aiosqlite, NullPool) so that
every session opens a real connection and the statement counter sees every
round-trip.
"""

from collections.abc import AsyncGenerator
from pathlib import Path
from uuid import UUID

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from src.studio.core.db import SessionFactory, create_tables, make_session_factory
from src.studio.core.error_classifier import ErrorClassifier
from src.studio.main import create_app
from src.studio.services import (
    Aggregator,
    DefensiveFetcher,
    EntityAccessService,
    EntityCache,
)
from tests.factories import generate_id


class QueryCounter:
    """Counts statements sent to the store (the "network calls")."""

    def __init__(self) -> None:
        self.statements: list[str] = []

    def __call__(self, conn, cursor, statement, parameters, context, executemany) -> None:
        self.statements.append(statement)

    @property
    def count(self) -> int:
        return len(self.statements)

    def reset(self) -> None:
        self.statements.clear()


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """Create a test engine on a fresh SQLite file with all tables."""
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'studio.db'}",
        poolclass=NullPool,
    )
    await create_tables(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> SessionFactory:
    return make_session_factory(engine)


@pytest.fixture
async def db_session(session_factory: SessionFactory) -> AsyncGenerator[AsyncSession]:
    """Session for arranging fixtures; tests must commit explicitly."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def query_counter(engine: AsyncEngine):
    counter = QueryCounter()
    event.listen(engine.sync_engine, "before_cursor_execute", counter)
    yield counter
    event.remove(engine.sync_engine, "before_cursor_execute", counter)


@pytest.fixture
def fetcher(session_factory: SessionFactory, classifier: ErrorClassifier) -> DefensiveFetcher:
    return DefensiveFetcher(session_factory, classifier)


@pytest.fixture
def aggregator(session_factory: SessionFactory, classifier: ErrorClassifier) -> Aggregator:
    return Aggregator(session_factory, classifier)


@pytest.fixture
def access_service(
    session_factory: SessionFactory,
    cache: EntityCache,
    classifier: ErrorClassifier,
) -> EntityAccessService:
    return EntityAccessService(session_factory, cache, classifier)


@pytest.fixture
def owner_id() -> UUID:
    return generate_id()


@pytest.fixture
def other_user_id() -> UUID:
    return generate_id()


@pytest.fixture
def app(session_factory: SessionFactory):
    return create_app(session_factory)


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient]:
    """HTTP client calling the app in-process."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture
def auth_headers(owner_id: UUID) -> dict[str, str]:
    return {"X-User-ID": str(owner_id)}
