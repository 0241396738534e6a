"""Base repository with common data access operations."""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """Base repository providing common database operations.

    Repositories handle data access only. Transaction control (commit)
    should be done in the service layer.

    Lookups by logical id always return a list. The store does not enforce
    uniqueness of ``id``, and a single-row primitive cannot tell "no rows"
    apart from "too many rows".
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession):
        self.session = session

    def _base_query(self) -> Any:
        """Query every repository read starts from."""
        return select(self.model)

    async def list_by_id(self, id: UUID) -> list[ModelType]:
        """All physical rows carrying this logical id, in insertion order."""
        query = (
            self._base_query()
            .where(self.model.id == id)  # type: ignore[attr-defined]
            .order_by(self.model.row_id)  # type: ignore[attr-defined]
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_where(self, *criteria: Any, order_by: Any = None) -> list[ModelType]:
        """Rows matching all criteria; insertion order unless ``order_by`` given."""
        query = self._base_query().where(*criteria)
        if order_by is not None:
            query = query.order_by(*order_by) if isinstance(order_by, tuple) else query.order_by(order_by)
        query = query.order_by(self.model.row_id)  # type: ignore[attr-defined]
        result = await self.session.execute(query)
        return list(result.scalars().all())

    def add(self, entity: ModelType) -> None:
        """Add entity to session (no flush/commit)."""
        self.session.add(entity)
