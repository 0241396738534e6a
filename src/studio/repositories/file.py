"""Repository for ProjectFile entity."""

from uuid import UUID

from sqlalchemy import delete

from src.studio.models import ProjectFile
from src.studio.repositories.base import BaseRepository


class FileRepository(BaseRepository[ProjectFile]):
    model = ProjectFile

    async def list_by_project(self, project_id: UUID) -> list[ProjectFile]:
        return await self.list_where(ProjectFile.project_id == project_id)

    async def delete_by_project(self, project_id: UUID) -> list[UUID]:
        """Delete a project's files, returning their ids."""
        ids = [f.id for f in await self.list_by_project(project_id)]
        await self.session.execute(
            delete(ProjectFile).where(ProjectFile.project_id == project_id)  # type: ignore[arg-type]
        )
        return ids
