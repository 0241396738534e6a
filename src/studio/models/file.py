"""Project file model."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel

from src.studio.models.base import utc_now
from src.studio.models.enums import FileType


class ProjectFile(SQLModel, table=True):
    """Source file belonging to a project."""

    __tablename__ = "project_files"

    row_id: int | None = Field(default=None, primary_key=True)
    id: UUID = Field(default_factory=uuid4, index=True)
    project_id: UUID = Field(index=True)
    name: str = Field(max_length=255)
    path: str = Field(max_length=1024)
    file_type: str = Field(default=FileType.OTHER.value, max_length=20)
    content: str = Field(default="", sa_column=Column(Text, nullable=False))
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
