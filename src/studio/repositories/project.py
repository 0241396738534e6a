"""Repository for Project entity."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import update
from sqlmodel import select

from src.studio.models import Project
from src.studio.repositories.base import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    """Repository for Project entity. Soft-deleted rows are never returned."""

    model = Project

    def _base_query(self) -> Any:
        return select(Project).where(Project.deleted_at.is_(None))  # type: ignore[union-attr]

    async def list_by_owner(self, owner_id: UUID) -> list[Project]:
        """Projects owned by a user, most recently updated first."""
        return await self.list_where(
            Project.owner_id == owner_id,
            order_by=Project.updated_at.desc(),  # type: ignore[attr-defined]
        )

    async def update_fields(self, project_id: UUID, values: dict[str, Any]) -> int:
        """Apply ``values`` to every live row with this id. Returns rows affected."""
        result = await self.session.execute(
            update(Project)
            .where(Project.id == project_id)  # type: ignore[arg-type]
            .where(Project.deleted_at.is_(None))  # type: ignore[union-attr]
            .values(**values)
        )
        return result.rowcount or 0

    async def soft_delete(self, project_id: UUID, when: datetime) -> int:
        """Mark every live row with this id as deleted. Returns rows affected."""
        return await self.update_fields(project_id, {"deleted_at": when, "updated_at": when})
