"""Database utilities - engine, session factory, table creation."""

from src.studio.core.db.engine import create_tables, dispose_engine, get_engine
from src.studio.core.db.session import SessionFactory, make_session_factory

__all__ = [
    # Engine
    "create_tables",
    "dispose_engine",
    "get_engine",
    # Session
    "SessionFactory",
    "make_session_factory",
]
