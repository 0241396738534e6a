"""Repository for ProjectSetting entity."""

from typing import Any
from uuid import UUID

from sqlalchemy import delete
from sqlmodel import select

from src.studio.models import ProjectSetting
from src.studio.models.base import utc_now
from src.studio.repositories.base import BaseRepository


class SettingRepository(BaseRepository[ProjectSetting]):
    """Settings are keyed by (project_id, key) and have no id of their own."""

    model = ProjectSetting

    async def list_by_project(self, project_id: UUID) -> list[ProjectSetting]:
        return await self.list_where(ProjectSetting.project_id == project_id)

    async def get(self, project_id: UUID, key: str) -> ProjectSetting | None:
        result = await self.session.execute(
            select(ProjectSetting).where(
                ProjectSetting.project_id == project_id,
                ProjectSetting.key == key,
            )
        )
        return result.scalars().first()

    async def upsert(self, project_id: UUID, key: str, value: Any) -> ProjectSetting:
        """Insert or overwrite one setting (no flush/commit)."""
        setting = await self.get(project_id, key)
        if setting is None:
            setting = ProjectSetting(project_id=project_id, key=key, value=value)
            self.add(setting)
        else:
            setting.value = value
            setting.updated_at = utc_now()
        return setting

    async def delete_by_project(self, project_id: UUID) -> int:
        result = await self.session.execute(
            delete(ProjectSetting).where(ProjectSetting.project_id == project_id)  # type: ignore[arg-type]
        )
        return result.rowcount or 0
