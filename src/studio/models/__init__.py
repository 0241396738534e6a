"""Model exports.

Import from here: `from src.studio.models import Project, Conversation`
"""

from src.studio.models.conversation import Conversation, Message
from src.studio.models.enums import EntityKind, FileType, MessageRole
from src.studio.models.file import ProjectFile
from src.studio.models.project import Project
from src.studio.models.setting import ProjectSetting

__all__ = [
    # Enums
    "EntityKind",
    "FileType",
    "MessageRole",
    # Tables
    "Conversation",
    "Message",
    "Project",
    "ProjectFile",
    "ProjectSetting",
]
