"""Conversation and message schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field, field_validator

from src.studio.models.enums import MessageRole

DEFAULT_CONVERSATION_TITLE = "New Conversation"


class ConversationCreate(BaseModel):
    """Schema for starting a conversation under a project.

    ``project_id`` stays a string here; the access layer validates it so that
    a malformed id is reported before any storage round-trip.
    """

    project_id: str = Field(validation_alias=AliasChoices("project_id", "projectId"))
    title: str | None = Field(default=None, max_length=200)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str | None:
        if v is not None:
            v = v.strip()
            if not v:
                return None
        return v


class ConversationUpdate(BaseModel):
    title: str = Field(min_length=1, max_length=200)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Conversation title cannot be empty or whitespace only")
        return v


class MessageCreate(BaseModel):
    content: str = Field(min_length=1)
    role: MessageRole = MessageRole.USER

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message content cannot be empty or whitespace only")
        return v


class MessageRead(BaseModel):
    id: UUID
    conversation_id: UUID
    role: MessageRole
    content: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ConversationRead(BaseModel):
    id: UUID
    project_id: UUID
    owner_id: UUID
    title: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ConversationDetail(ConversationRead):
    """Conversation with its messages attached, oldest first."""

    messages: list[MessageRead] = Field(default_factory=list)
