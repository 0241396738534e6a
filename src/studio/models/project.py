"""Project model - root of the entity hierarchy."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from src.studio.models.base import utc_now


class Project(SQLModel, table=True):
    """Extension project owned by a single user.

    ``id`` is the logical identifier but is NOT unique at the storage level:
    the hosted store has been observed to hold several physical rows with the
    same id. ``row_id`` is the physical key and defines insertion order.
    """

    __tablename__ = "projects"

    row_id: int | None = Field(default=None, primary_key=True)
    id: UUID = Field(default_factory=uuid4, index=True)
    name: str = Field(max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    owner_id: UUID = Field(index=True)
    manifest: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    deleted_at: datetime | None = Field(default=None)
