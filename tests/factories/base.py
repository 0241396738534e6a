"""Base factory configuration for polyfactory."""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from polyfactory.factories.sqlalchemy_factory import SQLAlchemyFactory


def utc_now() -> datetime:
    """Generate current UTC time (naive, matching the TIMESTAMP columns)."""
    return datetime.now(UTC).replace(tzinfo=None)


def generate_id() -> UUID:
    """Generate a logical entity id."""
    return uuid4()


class BaseFactory(SQLAlchemyFactory):
    """Base factory with common configuration for all models.

    Provides:
    - Logical ids generated per row, physical ``row_id`` left to the store
    - UTC timestamp generation
    - Disabled auto-relationship setting (parent ids are set explicitly)
    """

    __is_base_factory__ = True
    __set_relationships__ = False
    __set_foreign_keys__ = False

    row_id = None
