"""Database session management."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from src.studio.core.db.engine import get_engine

SessionFactory = async_sessionmaker[AsyncSession]


def make_session_factory(engine: AsyncEngine | None = None) -> SessionFactory:
    """Build a session factory bound to ``engine``.

    Every unit of work opens its own session from the factory. An
    ``AsyncSession`` must not be shared between concurrently running tasks,
    so the aggregator's parallel fetches each get a fresh one.
    """
    if engine is None:
        engine = get_engine()
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
