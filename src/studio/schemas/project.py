"""Project, file and setting schemas for API request/response."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field, JsonValue, field_validator

from src.studio.models.enums import FileType
from src.studio.schemas.conversation import ConversationDetail


class ProjectCreate(BaseModel):
    """Schema for creating a project."""

    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    manifest: dict[str, Any] | None = None
    owner_id: UUID | None = Field(
        default=None,
        validation_alias=AliasChoices("owner_id", "ownerId"),
        description="Must match the caller when given.",
    )
    seed_files: bool = Field(
        default=True,
        validation_alias=AliasChoices("seed_files", "seedFiles"),
        description="Create starter popup files and default settings.",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Project name cannot be empty or whitespace only")
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str | None) -> str | None:
        if v is not None:
            v = v.strip()
            if not v:
                return None
        return v


class ProjectUpdate(BaseModel):
    """Schema for updating a project."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    manifest: dict[str, Any] | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError("Project name cannot be empty or whitespace only")
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str | None) -> str | None:
        if v is not None:
            v = v.strip()
            if not v:
                return None
        return v


class ProjectRead(BaseModel):
    """Schema for reading a project row."""

    id: UUID
    name: str
    description: str | None
    owner_id: UUID
    manifest: dict[str, Any]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class FileCreate(BaseModel):
    """Schema for adding a file to a project."""

    name: str = Field(min_length=1, max_length=255)
    path: str | None = Field(default=None, max_length=1024)
    file_type: FileType | None = Field(
        default=None,
        validation_alias=AliasChoices("file_type", "fileType", "type"),
        description="Inferred from the file extension when omitted.",
    )
    content: str = ""

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("File name cannot be empty or whitespace only")
        return v


class FileRead(BaseModel):
    id: UUID
    project_id: UUID
    name: str
    path: str
    file_type: FileType
    content: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SettingUpsert(BaseModel):
    value: JsonValue


class SettingRead(BaseModel):
    project_id: UUID
    key: str
    value: Any

    model_config = {"from_attributes": True}


class ProjectDetail(ProjectRead):
    """Project with its dependent collections attached."""

    files: list[FileRead] = Field(default_factory=list)
    settings: list[SettingRead] = Field(default_factory=list)
    conversations: list[ConversationDetail] = Field(default_factory=list)
