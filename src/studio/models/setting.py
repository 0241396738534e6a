"""Project setting model - keyed by (project_id, key)."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel

from src.studio.models.base import utc_now


class ProjectSetting(SQLModel, table=True):
    __tablename__ = "project_settings"
    __table_args__ = (UniqueConstraint("project_id", "key", name="uq_project_settings_key"),)

    row_id: int | None = Field(default=None, primary_key=True)
    project_id: UUID = Field(index=True)
    key: str = Field(max_length=100)
    value: Any = Field(default=None, sa_column=Column(JSON, nullable=True))
    updated_at: datetime = Field(default_factory=utc_now)
