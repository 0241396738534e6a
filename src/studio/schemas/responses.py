"""Response envelopes.

Every body has the shape ``{message, <entity-or-entities>, error?}``.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from src.studio.core.errors import ErrorKind, ErrorSeverity
from src.studio.schemas.conversation import ConversationDetail, ConversationRead, MessageRead
from src.studio.schemas.project import FileRead, ProjectDetail, ProjectRead, SettingRead


class ErrorBody(BaseModel):
    kind: ErrorKind
    code: int | str | None = None
    severity: ErrorSeverity
    timestamp: datetime
    recoverable: bool
    request_id: str | None = None
    redirect: str | None = Field(
        default=None,
        description="Client error view carrying message, code, kind and project id.",
    )


class Envelope(BaseModel):
    message: str
    error: ErrorBody | None = None


class ProjectEnvelope(Envelope):
    project: ProjectDetail


class ProjectListEnvelope(Envelope):
    projects: list[ProjectRead]


class FileEnvelope(Envelope):
    file: FileRead


class SettingEnvelope(Envelope):
    setting: SettingRead


class ConversationEnvelope(Envelope):
    conversation: ConversationDetail


class ConversationListEnvelope(Envelope):
    conversations: list[ConversationRead]


class MessageEnvelope(Envelope):
    # "message" is the status text, so the appended Message travels as "entry"
    entry: MessageRead


class ErrorRecord(BaseModel):
    kind: ErrorKind
    severity: ErrorSeverity
    code: int | str | None = None
    message: str
    timestamp: datetime
    recoverable: bool
    endpoint: str | None = None


class ErrorHistoryEnvelope(Envelope):
    errors: list[ErrorRecord]


class GuidanceEnvelope(Envelope):
    kind: ErrorKind
    friendly_message: str
    suggestions: list[str]
