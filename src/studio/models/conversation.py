"""Conversation and message models."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel

from src.studio.models.base import utc_now
from src.studio.models.enums import MessageRole


class Conversation(SQLModel, table=True):
    """Assistant conversation attached to a project.

    ``updated_at`` is bumped on every message append and drives display order.
    """

    __tablename__ = "conversations"

    row_id: int | None = Field(default=None, primary_key=True)
    id: UUID = Field(default_factory=uuid4, index=True)
    project_id: UUID = Field(index=True)
    owner_id: UUID = Field(index=True)
    title: str = Field(max_length=200)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, index=True)


class Message(SQLModel, table=True):
    """Append-only conversation entry."""

    __tablename__ = "messages"

    row_id: int | None = Field(default=None, primary_key=True)
    id: UUID = Field(default_factory=uuid4, index=True)
    conversation_id: UUID = Field(index=True)
    role: str = Field(default=MessageRole.USER.value, max_length=20)
    content: str = Field(sa_column=Column(Text, nullable=False))
    created_at: datetime = Field(default_factory=utc_now)
